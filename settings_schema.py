from typing import Literal

from pydantic import BaseModel, Field, ValidationError


class SettingsSchema(BaseModel):
    weight_unit: Literal["lb", "kg"] = "lb"
    sets_per_exercise: int = Field(5, ge=1, le=20)
    target_reps: int = Field(5, ge=1, le=50)
    rest_seconds: int = Field(90, ge=0)
    program_name: str = "StrongLifts 5×5"
    workout_type: str = "A"
    alert_retention_days: int = Field(30, ge=1)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


DEFAULT_SETTINGS = SettingsSchema().model_dump()


def validate_settings(data: dict) -> None:
    try:
        SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
