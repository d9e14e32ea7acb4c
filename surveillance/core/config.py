"""
Application configuration for symptom surveillance.

Provides environment-aware settings with conservative defaults. The detection
window, history gate and threshold multiplier are configurable to avoid
hard-coded "magic numbers".
"""

from __future__ import annotations

from pathlib import Path
from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYMPTOMS = ["fever", "cough", "diarrhea", "rash", "vomiting", "breathlessness"]


class DetectionConfig(BaseModel):
	"""
	Settings for the outbreak detector and trend window.

	Notes:
	- window_days: trailing calendar days, inclusive of today.
	- min_history_days: groups with fewer active days are never evaluated.
	- std_multiplier: threshold = mean + std_multiplier * std.
	- threshold_decimals: rounding applied to the reported threshold only.
	"""

	window_days: int = Field(7, ge=1)
	min_history_days: int = Field(3, ge=1)
	std_multiplier: float = Field(2.0, ge=0.0)
	threshold_decimals: int = Field(2, ge=0)


class Config(BaseSettings):
	"""
	Global configuration with environment overrides.
	"""

	model_config = SettingsConfigDict(
		env_prefix="SURVEILLANCE_",
		env_file=".env",
		env_nested_delimiter="__",
		extra="ignore",
	)

	log_level: str = Field("INFO", description="Default logging level")
	logs_dir: Path = Field(Path("logs"), description="Directory for log files")
	timezone: str = Field("UTC", description="IANA timezone that defines a calendar day")
	symptom_vocabulary: List[str] = Field(
		default_factory=lambda: list(DEFAULT_SYMPTOMS),
		description="Closed set of recognised symptom keys",
	)
	detection: DetectionConfig = DetectionConfig()

	@field_validator("timezone")
	@classmethod
	def _known_timezone(cls, value: str) -> str:
		try:
			ZoneInfo(value)
		except (ZoneInfoNotFoundError, ValueError) as exc:
			raise ValueError(f"Unknown timezone: {value}") from exc
		return value

	@field_validator("symptom_vocabulary")
	@classmethod
	def _normalize_vocabulary(cls, value: List[str]) -> List[str]:
		seen: List[str] = []
		for symptom in value:
			key = symptom.strip().lower()
			if key and key not in seen:
				seen.append(key)
		if not seen:
			raise ValueError("symptom_vocabulary must not be empty")
		return seen

	@property
	def tzinfo(self) -> ZoneInfo:
		return ZoneInfo(self.timezone)


config = Config()
