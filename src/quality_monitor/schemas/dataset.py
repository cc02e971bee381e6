# schemas/dataset.py

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from quality_monitor.errors import InvalidDatasetError


class ColumnType(StrEnum):
    """
    Column types the engine has type-specific rules for.
    """

    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    TEXT = "text"
    DATE = "date"


class ColumnSpec(BaseModel):
    """
    A declared column of a dataset.

    The declared type is kept as given by the dataset source; unrecognised
    types are tolerated here and only skipped by type-specific rules.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    declared_type: str

    @field_validator("declared_type")
    @classmethod
    def _normalise_type(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def column_type(self) -> ColumnType | None:
        """
        The recognised column type, or None when the declared type is unknown.
        """
        try:
            return ColumnType(self.declared_type)
        except ValueError:
            return None


class Dataset(BaseModel):
    """
    Immutable snapshot of a tabular dataset.

    Records are mappings from column name to raw value. A key missing from a
    record reads as a null value for that column.
    """

    model_config = ConfigDict(frozen=True)

    columns: tuple[ColumnSpec, ...] = Field(min_length=1)
    records: tuple[dict[str, Any], ...]
    dataset_id: str | None = None

    @field_validator("columns")
    @classmethod
    def _unique_column_names(
        cls,
        columns: tuple[ColumnSpec, ...],
    ) -> tuple[ColumnSpec, ...]:
        names = [column.name for column in columns]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate column names: {', '.join(duplicates)}")
        return columns

    @property
    def row_count(self) -> int:
        return len(self.records)

    def column_values(self, name: str) -> list[object]:
        """
        Return the raw values of a column in record order.

        Args:
            name: Column name.

        Returns:
            list[object]: One value per record, None where the key is absent.
        """
        return [record.get(name) for record in self.records]


def load_dataset(payload: object) -> Dataset:
    """
    Validate a dataset payload from an external source.

    Accepts an existing Dataset unchanged, or a mapping with ``columns``,
    ``records`` and optional ``dataset_id`` keys. Columns may be given as
    mappings with ``name`` and ``declared_type`` (or ``type``).

    Args:
        payload: Dataset or raw mapping supplied by the dataset source.

    Returns:
        Dataset: The validated, immutable dataset.

    Raises:
        InvalidDatasetError: If the payload has no columns or no record structure.
    """
    if isinstance(payload, Dataset):
        return payload

    if not isinstance(payload, Mapping):
        raise InvalidDatasetError(
            "Dataset payload must be a mapping",
            (f"got {type(payload).__name__}",),
        )

    data = dict(payload)
    data["columns"] = [_column_payload(column) for column in data.get("columns") or ()]

    try:
        return Dataset.model_validate(data)
    except ValidationError as error:
        details = tuple(
            f"{'.'.join(str(part) for part in issue['loc'])}: {issue['msg']}"
            for issue in error.errors()
        )
        raise InvalidDatasetError(
            "Dataset payload failed validation",
            details,
        ) from error


def _column_payload(column: object) -> object:
    """
    Accept the ``type`` alias used by some dataset sources for declared_type.

    Returns:
        object: The column payload with ``declared_type`` populated when possible.
    """
    if isinstance(column, dict) and "declared_type" not in column and "type" in column:
        return {"name": column.get("name"), "declared_type": column["type"]}
    return column
