from .progression_rules import ProgressionRules
from .rep_prediction import RepPredictor
from .plateau_detection import PlateauDetector
from .volume_balance import VolumeBalance

__all__ = ["ProgressionRules", "RepPredictor", "PlateauDetector", "VolumeBalance"]
