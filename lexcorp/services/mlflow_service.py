"""
services/mlflow_service.py
--------------------------
MLflow experiment tracking for the drafting assistant.

What this tracks:
  - Every AI call is logged as a run inside the "lexcorp-clm" experiment.
  - Parameters: operation, model name, prompt length, organization_id, user_id
  - Metrics: response length, latency in milliseconds
  - Tags: organization_id, operation

Tracking never breaks a request: failures are logged and swallowed.

View the MLflow UI:
  mlflow ui --port 5001
"""

from typing import Optional

from lexcorp.core.config import settings
from lexcorp.core.logging import get_logger

logger = get_logger(__name__)

EXPERIMENT_NAME = "lexcorp-clm"


def _get_mlflow():
    """
    Lazy import so mlflow's import cost is only paid when tracking runs.
    Returns the mlflow module or None.
    """
    try:
        import mlflow
        return mlflow
    except ImportError:
        logger.warning("mlflow not installed, tracking disabled")
        return None


def setup_mlflow() -> None:
    """
    Called once at application startup.
    Points MLflow at MLFLOW_TRACKING_URI and creates the experiment if needed.
    """
    mlflow = _get_mlflow()
    if mlflow is None:
        return

    try:
        mlflow.set_tracking_uri(settings.MLFLOW_TRACKING_URI)
        if mlflow.get_experiment_by_name(EXPERIMENT_NAME) is None:
            mlflow.create_experiment(EXPERIMENT_NAME)
            logger.info("MLflow experiment created", experiment=EXPERIMENT_NAME)
        mlflow.set_experiment(EXPERIMENT_NAME)
        logger.info("MLflow tracking initialised", uri=settings.MLFLOW_TRACKING_URI)
    except Exception as exc:
        logger.warning("MLflow setup failed (non-fatal)", error=str(exc))


def track_ai_call(
    operation: str,
    prompt: str,
    response: str,
    latency_ms: float,
    organization_id: str,
    user_id: str,
    mock: bool = True,
) -> Optional[str]:
    """
    Log a single AI call as an MLflow run.

    Mock calls are not tracked. Returns the run_id, or None if nothing was
    logged.
    """
    if mock:
        return None

    mlflow = _get_mlflow()
    if mlflow is None:
        return None

    try:
        mlflow.set_experiment(EXPERIMENT_NAME)

        with mlflow.start_run() as run:
            mlflow.log_params({
                "operation":       operation,
                "model":           settings.LLM_MODEL,
                "prompt_length":   len(prompt),
                "organization_id": organization_id,
                "user_id":         user_id,
                "environment":     settings.APP_ENV,
            })

            mlflow.log_metrics({
                "latency_ms":        latency_ms,
                "response_length":   len(response),
                # ~4 chars per token
                "approx_tokens_in":  len(prompt) / 4,
                "approx_tokens_out": len(response) / 4,
            })

            mlflow.set_tags({
                "organization_id": organization_id,
                "operation":       operation,
            })

            run_id = run.info.run_id
            logger.info("MLflow run logged", run_id=run_id, operation=operation)
            return run_id

    except Exception as exc:
        logger.warning("MLflow tracking failed (non-fatal)", error=str(exc))
        return None
