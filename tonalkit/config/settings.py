"""Analysis settings and preferences"""
from dataclasses import asdict, dataclass, field, fields
from typing import Dict
import json
import logging
import os

from tonalkit.analysis.score_tension import ScoreTensionWeights
from tonalkit.analysis.tension import TensionOptions, TensionWeights

logger = logging.getLogger(__name__)


@dataclass
class AnalysisSettings:
    # Score settings
    ticks_per_quarter: int = 480
    tuning_hz: float = 440.0

    # Key detection settings
    key_profile: str = "krumhansl"
    weight_by_duration: bool = True
    key_confidence_threshold: float = 0.65

    # Roughness / tension settings
    num_harmonics: int = 6
    tension_weights: Dict[str, float] = field(default_factory=lambda: {
        "roughness": 0.3, "metric": 0.3, "registral": 0.2, "density": 0.2, "tonal": 0.0
    })
    score_tension_weights: Dict[str, float] = field(default_factory=lambda: {
        "tps": 0.4, "spiral": 0.3, "tiv": 0.3
    })
    peak_flatness_tolerance: float = 0.0

    # Logging
    log_level: str = "INFO"

    def tension_options(self) -> TensionOptions:
        return TensionOptions(weights=TensionWeights.from_dict(self.tension_weights),
                              num_harmonics=self.num_harmonics)

    def score_weights(self) -> ScoreTensionWeights:
        known = {f.name for f in fields(ScoreTensionWeights)}
        return ScoreTensionWeights(**{k: v for k, v in self.score_tension_weights.items() if k in known})

    @classmethod
    def load(cls, config_path: str = "tonalkit.json") -> 'AnalysisSettings':
        """Load settings from file; unknown keys are ignored"""
        if os.path.exists(config_path):
            try:
                with open(config_path, 'r') as f:
                    data = json.load(f)
                known = {f.name for f in fields(cls)}
                ignored = sorted(set(data) - known)
                if ignored:
                    logger.warning("Ignoring unknown settings keys: %s", ", ".join(ignored))
                return cls(**{k: v for k, v in data.items() if k in known})
            except (OSError, ValueError, TypeError, AttributeError) as e:
                logger.error("Error loading settings from %s: %s", config_path, e)
        return cls()  # Return defaults

    def save(self, config_path: str = "tonalkit.json"):
        """Save settings to file"""
        with open(config_path, 'w') as f:
            json.dump(asdict(self), f, indent=2)
        logger.debug("Saved settings to %s", config_path)
