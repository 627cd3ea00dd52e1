"""
Base schemas with standardized field types for consistent responses.
"""
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic_core import core_schema


class StandardizedModel(BaseModel):
    """Response base: reads ORM attributes and emits enum values."""

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True, from_attributes=True)


class Money(Decimal):
    """Decimal amount that serializes as a float in JSON output."""

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        def validate_money(value: Any) -> Decimal:
            if isinstance(value, Decimal):
                return value
            if isinstance(value, (int, float, str)):
                return Decimal(str(value))
            raise ValueError(f"Cannot convert {type(value)} to Money")

        return core_schema.no_info_after_validator_function(
            validate_money,
            core_schema.union_schema(
                [
                    core_schema.is_instance_schema(Decimal),
                    core_schema.int_schema(),
                    core_schema.float_schema(),
                    core_schema.str_schema(),
                ]
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(
                float,
                info_arg=False,
                return_schema=core_schema.float_schema(),
            ),
        )
