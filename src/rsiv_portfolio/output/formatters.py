from rsiv_portfolio.models.common import Action, SafetyStatus


def fmt_pct(value: float | None, decimals: int = 2) -> str:
    if value is None:
        return "N/A"
    return f"{value:.{decimals}f}%"


def fmt_number(value: float | None, decimals: int = 2) -> str:
    if value is None:
        return "N/A"
    return f"{value:,.{decimals}f}"


def fmt_amount(value: float | None, unit: str = "", decimals: int = 2) -> str:
    if value is None:
        return "N/A"
    text = fmt_number(value, decimals)
    return f"{text} {unit}" if unit else text


def action_color(action: Action) -> str:
    colors = {
        Action.INCREASE: "bold green",
        Action.DECREASE: "bold red",
        Action.HOLD: "yellow",
    }
    return colors.get(action, "white")


def health_color(healthy: bool) -> str:
    return "green" if healthy else "red"


def safety_label(level: int, status: SafetyStatus) -> str:
    return f"Safety level: {level} ({status.value})"


def weight_bar(percent: float, width: int = 20) -> str:
    clamped = min(max(percent, 0.0), 100.0)
    filled = round(clamped / 100 * width)
    return "█" * filled + "░" * (width - filled)
