"""Local model configuration records."""

import os

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, PositiveInt, field_validator


class ModelConfig(BaseModel):
    """Configuration of one locally hosted model."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    name: str = Field(min_length=1)
    model_path: str = Field(min_length=1)
    context_size: PositiveInt | None = 4096
    gpu_layer_count: NonNegativeInt = 0
    main_gpu: NonNegativeInt = 0
    threads: int = -1
    batch_size: PositiveInt = 512
    ubatch_size: PositiveInt = 512
    system_prompt: str

    @field_validator("threads")
    @classmethod
    def validate_threads(cls, v: int) -> int:
        """-1 selects the CPU count; otherwise at least one thread."""
        if v == -1 or v >= 1:
            return v
        raise ValueError("threads must be -1 (auto) or a positive integer")

    @property
    def resolved_threads(self) -> int:
        """Thread count with auto resolved against the host."""
        return self.threads if self.threads >= 1 else (os.cpu_count() or 1)
