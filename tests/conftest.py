"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timedelta
from typing import Any, Dict

import pytest

from trainjobs.database import create_db_engine, get_session_factory, init_database
from trainjobs.logger import StructuredLogger, reset_logger
from trainjobs.models import JobRequest
from trainjobs.store import JobStore


class SteppingClock:
    """Deterministic clock that moves forward one second per call."""

    def __init__(self, start: datetime = datetime(2024, 5, 1, 9, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        now = self.current
        self.current += timedelta(seconds=1)
        return now


@pytest.fixture(autouse=True)
def fresh_global_logger():
    """Keep the process-wide logger from leaking between tests."""
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'jobs.db'}"


@pytest.fixture
def engine(db_url):
    engine = create_db_engine(db_url)
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return get_session_factory(engine)


@pytest.fixture
def quiet_logger(tmp_path) -> StructuredLogger:
    """Logger writing only to a temporary directory."""
    return StructuredLogger(
        name="trainjobs-test",
        level="DEBUG",
        log_dir=tmp_path / "logs",
        enable_console=False,
    )


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def store(session_factory, quiet_logger, clock) -> JobStore:
    return JobStore(session_factory, logger=quiet_logger, clock=clock)


@pytest.fixture
def xgboost_payload() -> Dict[str, Any]:
    """Full request as the frontend submits it."""
    return {
        "jobName": "churn-xgb",
        "priority": 5,
        "namespace": "team-a",
        "algorithm": {"source": "builtin", "algorithmName": "xgboost"},
        "resources": {
            "instanceResources": {"cpuCores": 4, "memoryGiB": 16, "gpuCount": 0},
            "instanceCount": 2,
            "volumeSizeGB": 50,
        },
        "stoppingCondition": {"maxRuntimeSeconds": 3600},
        "inputDataConfig": [
            {
                "id": "in-1",
                "channelName": "train",
                "sourceType": "object-storage",
                "storageProvider": "minio",
                "endpoint": "http://minio.local:9000",
                "bucket": "datasets",
                "prefix": "churn/train/",
            }
        ],
        "outputDataConfig": {"artifactUri": "s3://models/churn-xgb/"},
        "hyperparameters": {
            "xgboost": {
                "num_round": 100,
                "early_stopping_rounds": None,
                "eta": 0.3,
                "max_depth": 6,
                "lambda": 1.0,
                "objective": "binary:logistic",
                "eval_metric": ["auc", "logloss"],
                "grow_policy": "depthwise",
            }
        },
        "customHyperparameters": {"seed": 42, "notes": {"owner": "ml-team"}},
        "targetClusters": ["member-1", "member-2"],
        "entrypoint": "python train.py",
        "headImage": "rayproject/ray:2.9.0",
        "workerImage": "rayproject/ray:2.9.0",
        "pvcName": "",
        "experimentTag": "baseline",
    }


@pytest.fixture
def xgboost_request(xgboost_payload) -> JobRequest:
    return JobRequest.model_validate(xgboost_payload)


@pytest.fixture
def minimal_request() -> JobRequest:
    """Request with an empty namespace and two target clusters."""
    return JobRequest.model_validate(
        {
            "jobName": "train-1",
            "namespace": "",
            "algorithm": {"algorithmName": "xgboost"},
            "targetClusters": ["c1", "c2"],
        }
    )


@pytest.fixture
def make_request():
    """Factory for small requests."""

    def _make(job_name: str, namespace: str = "", algorithm: str = "xgboost") -> JobRequest:
        return JobRequest.model_validate(
            {
                "jobName": job_name,
                "namespace": namespace,
                "algorithm": {"algorithmName": algorithm},
                "targetClusters": ["c1"],
            }
        )

    return _make
