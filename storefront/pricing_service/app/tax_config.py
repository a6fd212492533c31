"""Tax configuration model and its local JSON store."""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import RepositoryUnavailable

logger = logging.getLogger(__name__)


class TaxConfiguration(BaseModel):
    """Per-tenant tax settings.

    ``withholding_tax_*`` fields are persisted for compatibility with existing
    configuration files; no price computation reads them.
    """

    vat_rate_percent: Decimal = Field(
        default=Decimal("12"), ge=Decimal("0"), le=Decimal("100"), decimal_places=2, alias="vatRatePercent"
    )
    vat_inclusive: bool = Field(default=True, alias="vatInclusive")
    senior_pwd_discount_enabled: bool = Field(default=True, alias="seniorPwdDiscountEnabled")
    withholding_tax_enabled: bool = Field(default=False, alias="withholdingTaxEnabled")
    withholding_tax_rate_percent: Decimal = Field(
        default=Decimal("0"),
        ge=Decimal("0"),
        le=Decimal("100"),
        decimal_places=2,
        alias="withholdingTaxRatePercent",
    )

    model_config = ConfigDict(populate_by_name=True)


class TaxConfigurationStore:
    """Reads and writes the tax configuration as a JSON file."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> TaxConfiguration:
        """Return the saved configuration, or defaults when nothing is saved yet."""

        if not self._path.exists():
            logger.info("No tax configuration at %s; using defaults", self._path)
            return TaxConfiguration()
        try:
            raw = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
        except OSError as exc:
            raise RepositoryUnavailable(f"Could not read tax configuration from {self._path}") from exc
        try:
            return TaxConfiguration.model_validate_json(raw)
        except ValidationError as exc:
            raise RepositoryUnavailable(f"Tax configuration at {self._path} is invalid") from exc

    async def save(self, config: TaxConfiguration) -> None:
        payload = config.model_dump_json(by_alias=True, indent=2)
        try:
            await asyncio.to_thread(self._write, payload)
        except OSError as exc:
            raise RepositoryUnavailable(f"Could not write tax configuration to {self._path}") from exc
        logger.info("Saved tax configuration to %s", self._path)

    def _write(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        staging = self._path.with_suffix(self._path.suffix + ".tmp")
        staging.write_text(payload, encoding="utf-8")
        staging.replace(self._path)
