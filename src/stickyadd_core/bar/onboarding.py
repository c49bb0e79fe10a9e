"""Onboarding wizard state stored in the ``stickyadd.onboarding`` metafield."""
import json
import logging
from typing import Optional

from pydantic import BaseModel, Field, ValidationError


logger = logging.getLogger(__name__)


TOTAL_STEPS = 4


class OnboardingState(BaseModel):
    """Wizard progress: next step to show and whether setup finished."""

    current_step: int = Field(1, alias="currentStep", ge=1)
    setup_complete: bool = Field(False, alias="setupComplete")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_metafield(cls, value: Optional[str]) -> "OnboardingState":
        """Parse the metafield value; missing or invalid data yields step 1."""
        if not value:
            return cls()

        try:
            return cls.model_validate(json.loads(value))
        except (ValueError, ValidationError) as exc:
            logger.warning("Invalid onboarding metafield, resetting: %s", exc)
            return cls()

    def to_metafield(self) -> dict:
        return self.model_dump(by_alias=True)


def next_state(step: int, setup_complete: bool, reset: bool = False) -> OnboardingState:
    """State persisted after the merchant leaves ``step``."""
    if reset:
        return OnboardingState(current_step=1, setup_complete=False)
    return OnboardingState(current_step=step + 1, setup_complete=setup_complete)


def progress_percent(step: int) -> int:
    return round((step - 1) / TOTAL_STEPS * 100)
