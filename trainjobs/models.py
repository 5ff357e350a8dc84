"""
Request and response shapes for training jobs.

JobRequest mirrors the JSON the web frontend submits (camelCase keys).
Unknown keys are kept on the model so a request survives the trip through
storage unchanged.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

STATUS_PENDING = "Pending"
STATUS_RUNNING = "Running"
STATUS_SUCCEEDED = "Succeeded"
STATUS_FAILED = "Failed"

TERMINAL_STATUSES = (STATUS_SUCCEEDED, STATUS_FAILED)

DEFAULT_NAMESPACE = "default"


class CamelModel(BaseModel):
    """Base for frontend-facing payloads: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class Algorithm(CamelModel):
    source: str = ""  # "builtin" or "custom"
    algorithm_name: str = ""  # "xgboost", "tensorflow", ...


class InstanceResources(CamelModel):
    cpu_cores: int = 0
    memory_gib: int = Field(default=0, alias="memoryGiB")
    gpu_count: int = 0


class Resources(CamelModel):
    instance_resources: InstanceResources = Field(default_factory=InstanceResources)
    instance_count: int = 0
    volume_size_gb: int = Field(default=0, alias="volumeSizeGB")


class StoppingCondition(CamelModel):
    max_runtime_seconds: int = 0


class InputDataConfig(CamelModel):
    id: str = ""
    channel_name: str = ""
    source_type: str = ""
    storage_provider: str = ""
    endpoint: str = ""
    bucket: str = ""
    prefix: str = ""


class OutputDataConfig(CamelModel):
    artifact_uri: str = ""


class XGBoostHyperparameters(BaseModel):
    """XGBoost parameters, keyed exactly as xgboost names them."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    num_round: Optional[int] = None
    early_stopping_rounds: Optional[int] = None
    booster: Optional[str] = None
    objective: Optional[str] = None
    eval_metric: Optional[List[str]] = None
    eta: Optional[float] = None
    gamma: Optional[float] = None
    max_depth: Optional[int] = None
    min_child_weight: Optional[float] = None
    max_delta_step: Optional[float] = None
    subsample: Optional[float] = None
    colsample_bytree: Optional[float] = None
    lambda_: Optional[float] = Field(default=None, alias="lambda")
    alpha: Optional[float] = None
    tree_method: Optional[str] = None
    scale_pos_weight: Optional[float] = None
    max_bin: Optional[int] = None
    verbosity: Optional[int] = None
    nthread: Optional[str] = None


class Hyperparameters(CamelModel):
    xgboost: Optional[XGBoostHyperparameters] = None


class JobRequest(CamelModel):
    """Training job submission as received from the frontend."""

    job_name: str
    algorithm: Algorithm
    namespace: str = ""
    priority: int = 0
    resources: Resources = Field(default_factory=Resources)
    stopping_condition: StoppingCondition = Field(default_factory=StoppingCondition)
    input_data_config: List[InputDataConfig] = Field(default_factory=list)
    output_data_config: OutputDataConfig = Field(default_factory=OutputDataConfig)
    hyperparameters: Hyperparameters = Field(default_factory=Hyperparameters)
    custom_hyperparameters: Dict[str, Any] = Field(default_factory=dict)
    target_clusters: List[str] = Field(default_factory=list)
    entrypoint: str = ""
    head_image: str = ""
    worker_image: str = ""
    pvc_name: str = ""


class JobResponse(CamelModel):
    """Job as returned to API callers, rebuilt from a stored record."""

    id: str
    job_name: str
    namespace: str
    algorithm: str
    priority: int = 0
    request: JobRequest = Field(description="Original submission, reconstructed from storage")
    target_clusters: List[str] = Field(default_factory=list)
    status: str
    message: str = ""
    created_at: datetime
    updated_at: datetime


def new_job_id(job_name: str) -> str:
    """Return a job id of the form ``<job_name>-<8 hex chars>``."""
    return f"{job_name}-{uuid.uuid4().hex[:8]}"
