"""
Detection Use Cases

Inline anomaly detectors and the periodic threat pattern engine.
"""

from .anomaly_detectors import AnomalyDetectors
from .threat_pattern_engine import ThreatPatternEngine
from .threat_patterns import default_threat_patterns

__all__ = [
    "AnomalyDetectors",
    "ThreatPatternEngine",
    "default_threat_patterns",
]
