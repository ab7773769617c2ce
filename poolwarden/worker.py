import json
import logging
import os
import boto3
from typing import Any, Dict

from poolwarden.adapters.account_store import AccountStore
from poolwarden.adapters.aws_orgs import OrganizationsAdapter
from poolwarden.adapters.config_source import SSMConfigSource, YamlConfigSource
from poolwarden.core.reconciler import Reconciler
from poolwarden.core.validator import AccountValidator
from poolwarden.models.account import AccountRef

logger = logging.getLogger(__name__)
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())

# SQS caps DelaySeconds at 15 minutes
MAX_DELAY_SECONDS = 900

# Warm start cache: the reconciler (and its last feature gate snapshot) lives
# as long as the Lambda container does
CACHED_RECONCILER = None
sqs = None


class WorkerBootstrapError(Exception):
    """Raised when the worker environment is incomplete."""
    pass


def _bootstrap_reconciler() -> Reconciler:
    """Builds the reconciler from environment variables."""
    table_name = os.environ.get("ACCOUNTS_TABLE")
    if not table_name:
        raise WorkerBootstrapError("CRITICAL: ACCOUNTS_TABLE environment variable not set.")

    config_path = os.environ.get("CONFIG_PATH")
    ssm_path = os.environ.get("CONFIG_SSM_PATH")
    if config_path:
        config_source = YamlConfigSource(config_path)
    elif ssm_path:
        config_source = SSMConfigSource(ssm_path)
    else:
        raise WorkerBootstrapError("CRITICAL: one of CONFIG_PATH or CONFIG_SSM_PATH must be set.")

    store = AccountStore(table_name=table_name, region_name=os.environ.get("AWS_REGION", "us-east-1"))
    validator = AccountValidator(OrganizationsAdapter())
    return Reconciler(store, config_source, validator, default_shard_name=os.environ.get("SHARD_NAME", ""))


def get_reconciler() -> Reconciler:
    global CACHED_RECONCILER
    if CACHED_RECONCILER is not None:
        return CACHED_RECONCILER

    logger.info("Cold Start: Bootstrapping the reconciler...")
    CACHED_RECONCILER = _bootstrap_reconciler()
    return CACHED_RECONCILER


def _get_sqs():
    global sqs
    if sqs is None:
        sqs = boto3.client("sqs")
    return sqs


def parse_ref(body: Dict[str, Any]) -> AccountRef:
    if "ref" in body:
        return AccountRef.parse(body["ref"])
    namespace, name = body.get("namespace"), body.get("name")
    if not namespace or not name:
        raise ValueError("Record body needs 'namespace' and 'name' (or 'ref')")
    return AccountRef(namespace=namespace, name=name)


def requeue(record: Dict[str, Any], ref: AccountRef, delay_seconds: float) -> bool:
    """
    Puts the account back on the queue with a delay.
    Returns False when no requeue queue is configured, so the caller can
    fall back to reporting the record as a batch item failure.
    """
    queue_url = os.environ.get("REQUEUE_QUEUE_URL")
    if not queue_url:
        logger.warning(f"REQUEUE_QUEUE_URL not set - {ref} will be redelivered after the visibility timeout")
        return False

    delay = max(0, min(int(delay_seconds or 0), MAX_DELAY_SECONDS))
    _get_sqs().send_message(
        QueueUrl=queue_url,
        MessageBody=json.dumps({"namespace": ref.namespace, "name": ref.name}),
        DelaySeconds=delay,
    )
    logger.info(f"Requeued {ref} (message {record.get('messageId')}) with a {delay}s delay")
    return True


def lambda_handler(event, context):
    """
    Lambda entry point: one reconciliation per SQS record.

    Requeue decisions are acted on: a delayed copy of the message is sent to
    REQUEUE_QUEUE_URL, or the record is reported in batchItemFailures
    (requires ReportBatchItemFailures on the event source mapping).

    Args:
        event: SQS event whose record bodies name Account records
        context: Lambda context object
    """
    try:
        reconciler = get_reconciler()
    except Exception as e:
        logger.error(f"CRITICAL: Failed to bootstrap the worker environment: {e}")
        raise

    processed = 0
    malformed = 0
    decisions = []
    batch_item_failures = []

    for record in event.get("Records", []):
        try:
            ref = parse_ref(json.loads(record.get("body", "{}")))
        except (json.JSONDecodeError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Discarding malformed record {record.get('messageId')}: {e}")
            malformed += 1
            continue

        logger.info(f"Processing record {record.get('messageId')} for {ref}")
        report = reconciler.reconcile(ref)
        processed += 1

        if report.result.requeue and not requeue(record, ref, report.result.requeue_after):
            batch_item_failures.append({"itemIdentifier": record.get("messageId")})

        decisions.append({
            "account": str(ref),
            "outcomes": [k.value for k in report.kinds()],
            "requeue": report.result.requeue,
            "requeue_after": report.result.requeue_after,
        })

    return {
        "processed": processed,
        "malformed": malformed,
        "decisions": decisions,
        "batchItemFailures": batch_item_failures,
    }
