from enum import StrEnum


class Action(StrEnum):
    INCREASE = "Increase"
    DECREASE = "Decrease"
    HOLD = "Hold"

    @staticmethod
    def from_difference(difference: float, threshold: float = 1.0) -> "Action":
        if difference > threshold:
            return Action.INCREASE
        if difference < -threshold:
            return Action.DECREASE
        return Action.HOLD


class SafetyStatus(StrEnum):
    SAFE = "Safe"
    WARNING = "Warning"

    @staticmethod
    def from_level(level: int, warning_below: int = 5) -> "SafetyStatus":
        if level >= warning_below:
            return SafetyStatus.SAFE
        return SafetyStatus.WARNING
