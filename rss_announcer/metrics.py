"""CloudWatch pass metrics for RSS Discord Announcer."""

import boto3

from .logging_config import create_execution_logger
from .models import PassResult

# CloudWatch accepts at most 20 metrics per call
BATCH_SIZE = 20


def build_metric_data(result: PassResult) -> list[dict]:
    """Translate a pass result into CloudWatch metric data points."""
    counters = {
        "FeedsChecked": result.feeds_checked,
        "FeedsFailed": result.feeds_failed,
        "ItemsAnnounced": result.items_announced,
        "DeliveriesFailed": result.deliveries_failed,
        "Errors": len(result.errors),
    }
    metric_data = [
        {"MetricName": name, "Value": value, "Unit": "Count"}
        for name, value in counters.items()
    ]
    metric_data.append(
        {
            "MetricName": "PassSuccess",
            "Value": 1 if result.success else 0,
            "Unit": "Count",
            "Dimensions": [
                {"Name": "Status", "Value": "Success" if result.success else "Failure"}
            ],
        }
    )
    return metric_data


def send_pass_metrics(
    result: PassResult, namespace: str, aws_region: str, execution_id: str
) -> None:
    """
    Send per-pass metrics to CloudWatch.

    Failures are logged and never propagated to the polling loop.
    """
    metrics_logger = create_execution_logger("cloudwatch_metrics", execution_id)

    try:
        cloudwatch = boto3.client("cloudwatch", region_name=aws_region)
        metric_data = build_metric_data(result)

        for i in range(0, len(metric_data), BATCH_SIZE):
            batch = metric_data[i : i + BATCH_SIZE]
            cloudwatch.put_metric_data(Namespace=namespace, MetricData=batch)

        metrics_logger.info(
            "Successfully sent metrics to CloudWatch",
            metrics_sent=len(metric_data),
            namespace=namespace,
        )
    except Exception as e:
        metrics_logger.error(f"Failed to send CloudWatch metrics: {e}", error=str(e))
