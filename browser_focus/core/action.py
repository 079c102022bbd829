"""
Action script contract: one step = registered action name + raw args.
Args are validated later against the params model bound in the registry.
"""
# @file purpose: Define action data contracts.

from typing import Any

from pydantic import BaseModel, Field


class ActionSpec(BaseModel):
    name: str = Field(..., description="Registered action name.")
    args: dict[str, Any] = Field(
        default_factory=dict, description="Parameters for the action, validated before running."
    )
