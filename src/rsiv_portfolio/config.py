from pydantic import BaseModel, Field

BASELINE_RSIV = 50.0
DEFAULT_TIMEZONE = "Asia/Ho_Chi_Minh"
TIMESTAMP_FORMAT = "%H:%M:%S %d/%m/%Y"

OUTPERFORMING_TEMPLATE = (
    "The portfolio is outperforming the overall market (RSIV > {baseline:g})."
)
UNDERPERFORMING_TEMPLATE = (
    "The portfolio is underperforming the overall market (RSIV ≤ {baseline:g})."
)
WEAK_POSITIONS_ADVICE = (
    "Consider switching to stocks stronger than the market index, with solid "
    "intrinsic strength and a valid entry point per the method."
)
NO_WEAK_POSITIONS_TEMPLATE = (
    "No stock is weaker than the market index (all have RSIV >= {baseline:g})."
)

OUTPERFORMING_COMMENT = OUTPERFORMING_TEMPLATE.format(baseline=BASELINE_RSIV)
UNDERPERFORMING_COMMENT = UNDERPERFORMING_TEMPLATE.format(baseline=BASELINE_RSIV)
NO_WEAK_POSITIONS_COMMENT = NO_WEAK_POSITIONS_TEMPLATE.format(baseline=BASELINE_RSIV)


class AnalysisConfig(BaseModel):
    baseline: float = Field(default=BASELINE_RSIV, gt=0.0)
    rebalance_threshold: float = Field(default=1.0, ge=0.0)
    timezone: str = DEFAULT_TIMEZONE

    amount_unit: str = "million"  # display only, amounts are unit-agnostic
    output_dir: str = "reports"
    safety_warning_level: int = Field(default=5, ge=0, le=9)
