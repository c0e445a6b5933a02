"""Static metric catalog for the funding liquidity dashboard."""

from funding_liquidity_monitor.models.market_data import (
    Derivation,
    DerivationKind,
    FormatHint,
    LiquidityType,
    MetricCategory,
    MetricDefinition,
)


FUNDING = "Funding Liquidity"
DEALERS = "Primary Dealer Statistics"

CASH = LiquidityType.CASH_FUNDING
COLLATERAL = LiquidityType.COLLATERAL
MARKET = LiquidityType.MARKET

# Millions to billions
TO_BILLIONS = 0.001


def _primary(
    metric_id: str,
    name: str,
    description: str,
    fmt: FormatHint,
    fred_id: str | None = None,
    liquidity_type: LiquidityType = CASH,
    section: str = FUNDING,
    scale: float | None = None,
) -> MetricDefinition:
    return MetricDefinition(
        id=metric_id,
        name=name,
        category=MetricCategory.PRIMARY,
        description=description,
        liquidity_type=liquidity_type,
        format=fmt,
        section=section,
        fred_id=fred_id,
        transform_scale=scale,
    )


def _secondary(
    metric_id: str,
    name: str,
    description: str,
    derivation: Derivation,
    fmt: FormatHint = FormatHint.SPREAD,
    liquidity_type: LiquidityType = CASH,
    section: str = FUNDING,
    scale: float | None = None,
) -> MetricDefinition:
    return MetricDefinition(
        id=metric_id,
        name=name,
        category=MetricCategory.SECONDARY,
        description=description,
        liquidity_type=liquidity_type,
        format=fmt,
        section=section,
        transform_scale=scale,
        derivation=derivation,
    )


def spread(a: str, b: str) -> Derivation:
    """A minus B on dates present in both."""
    return Derivation(DerivationKind.PAIR_OP, (a, b), {"op": "subtract"})


def ratio(a: str, b: str, absolute: bool = False) -> Derivation:
    """A divided by B (or |B|) on dates present in both; zero divisor yields 0."""
    return Derivation(
        DerivationKind.PAIR_OP, (a, b), {"op": "divide_abs" if absolute else "divide"}
    )


def rolling_vol(source: str, window: int = 30) -> Derivation:
    return Derivation(DerivationKind.ROLLING_STAT, (source,), {"window": window})


def tail_percentile(
    source: str, window: int = 365, step: int = 5, percentile: float = 99
) -> Derivation:
    return Derivation(
        DerivationKind.PERCENTILE_WINDOW,
        (source,),
        {"window": window, "step": step, "percentile": percentile},
    )


def lag_diff(source: str) -> Derivation:
    return Derivation(DerivationKind.LAG_DIFF, (source,))


METRICS: list[MetricDefinition] = [
    # ===== Funding liquidity: primary =====
    _primary(
        "SOFR", "Daily SOFR",
        "Secured Overnight Financing Rate. Broad measure of the cost of borrowing "
        "cash overnight collateralized by Treasury securities.",
        FormatHint.PERCENT, fred_id="SOFR",
    ),
    _primary(
        "FEDFUNDS", "FED Interest Rate",
        "Effective Federal Funds Rate (Daily). The interest rate at which "
        "depository institutions trade federal funds.",
        FormatHint.PERCENT, fred_id="DFF",  # Daily series, not the monthly FEDFUNDS
    ),
    _primary(
        "SRFTSYD", "Standing Repo Rate",
        "Standing Repo Facility Rate. The rate at which the Fed lends against "
        "Treasuries to eligible counterparties.",
        FormatHint.PERCENT, fred_id="SRFTSYD",
    ),
    _primary(
        "TGCRRATE", "GC Repo Rate",
        "Tri-Party General Collateral Rate. A measure of rates on overnight, "
        "specific-counterparty tri-party repo transactions.",
        FormatHint.PERCENT, fred_id="TGCRRATE",
    ),
    _primary(
        "TGCRVOLUME", "GC Repo Volume",
        "Total volume of Tri-Party General Collateral Repo transactions.",
        FormatHint.CURRENCY, fred_id="TGCRVOLUME",
    ),
    _primary(
        "IORB", "IORB Rate",
        "Interest on Reserve Balances. The rate of interest the Federal Reserve "
        "pays on balances held in master accounts.",
        FormatHint.PERCENT, fred_id="IORB",
    ),
    _primary(
        "RRPONTSYOFFR", "ON RRP Rate",
        "Overnight Reverse Repurchase Agreements Offering Rate. The rate the Fed "
        "pays on cash invested in its ON RRP facility.",
        FormatHint.PERCENT, fred_id="RRPONTSYOFFR",
    ),
    _primary(
        "REPO_FAILS", "Repo Fails (Weekly)",
        "Settlement Fails: Fails to Deliver (US Treasuries). NY Fed Primary "
        "Dealer Statistics (Weekly). Converted to Billions.",
        FormatHint.CURRENCY, fred_id="FRBCSNO", liquidity_type=COLLATERAL,
        scale=TO_BILLIONS,
    ),
    _primary(
        "RRP_USAGE", "Total RRP Usage",
        "Total Overnight Reverse Repurchase Agreements Volume. Proxy for excess "
        "cash in the system.",
        FormatHint.CURRENCY, fred_id="RRPONTSYD",
    ),
    _primary(
        "BANK_RESERVES", "Bank Reserves",
        "Total Reserve Balances maintained by Federal Reserve Banks. Key "
        "indicator of banking system liquidity.",
        FormatHint.CURRENCY, fred_id="WRESBAL",
    ),
    _primary(
        "DTB3", "3 Month T-Bill",
        "Market Yield on U.S. Treasury Securities at 3-Month Constant Maturity.",
        FormatHint.PERCENT, fred_id="DTB3", liquidity_type=MARKET,
    ),
    _primary(
        "CP_RATE", "3M AA Fin CP Rate",
        "3-Month AA Financial Commercial Paper Rate. Unsecured short-term "
        "funding cost for high-quality financial issuers.",
        FormatHint.PERCENT, fred_id="RIFSPPFAAD90NB",
    ),
    _primary(
        "CD_3M", "3M CD Rate",
        "3-Month Certificate of Deposit Rate (Secondary Market). Unsecured bank "
        "funding cost.",
        FormatHint.PERCENT, fred_id="IR3TCD01USM156N",
    ),
    _primary(
        "FOREIGN_USD", "Foreign UST Holdings",
        "Securities Held in Custody for Foreign Official and International "
        "Accounts. Converted to Billions.",
        FormatHint.CURRENCY, fred_id="WMTSECL1", scale=TO_BILLIONS,
    ),

    # ===== Funding liquidity: secondary =====
    _secondary(
        "SOFR_VOL", "SOFR Volatility",
        "Rolling 30-day standard deviation of Daily SOFR.",
        rolling_vol("SOFR"), fmt=FormatHint.NUMBER,
    ),
    _secondary(
        "SOFR_FED_SPREAD", "SOFR - Fed Funds",
        "Spread between SOFR and Fed Funds. Positive spread indicates secured "
        "funding is expensive relative to the unsecured target.",
        spread("SOFR", "FEDFUNDS"),
    ),
    _secondary(
        "SOFR_IORB_SPREAD", "SOFR - IORB",
        "Spread between SOFR and IORB. Attractiveness of lending in repo vs "
        "keeping reserves at the Fed.",
        spread("SOFR", "IORB"),
    ),
    _secondary(
        "SOFR_RRP_SPREAD", "SOFR - ON RRP",
        "Spread between SOFR and ON RRP. Incentive to lend in the private market "
        "vs the Fed facility.",
        spread("SOFR", "RRPONTSYOFFR"),
    ),
    _secondary(
        "SOFR_TAIL", "SOFR 99th % (Tail)",
        "99th Percentile of SOFR distribution over the last year. Tail risk measure.",
        tail_percentile("SOFR"), fmt=FormatHint.PERCENT,
    ),
    _secondary(
        "GC_IORB_SPREAD", "GC Repo - IORB",
        "General Collateral Repo rate minus IORB. Arbitrage incentive measure.",
        spread("TGCRRATE", "IORB"),
    ),
    _secondary(
        "GC_RRP_SPREAD", "GC Repo - ON RRP",
        "General Collateral Repo rate minus ON RRP rate.",
        spread("TGCRRATE", "RRPONTSYOFFR"),
    ),
    _secondary(
        "GC_SOFR_SPREAD", "GC Repo - SOFR",
        "Basis between tri-party GC and SOFR.",
        spread("TGCRRATE", "SOFR"),
    ),
    _secondary(
        "GC_SRF_SPREAD", "GC Repo - SRF",
        "Distance to the Standing Repo Facility rate (ceiling).",
        spread("TGCRRATE", "SRFTSYD"),
    ),
    _secondary(
        "IORB_DTB3_SPREAD", "IORB - 3M T-Bill",
        "Spread between the risk-free reserve rate and 3M Bills.",
        spread("IORB", "DTB3"),
    ),
    _secondary(
        "IORB_FED_SPREAD", "IORB - Fed Funds",
        "Spread between Interest on Reserves and Effective Fed Funds.",
        spread("IORB", "FEDFUNDS"),
    ),
    _secondary(
        "SPECIALNESS", "Specialness",
        "SOFR minus GC Repo Rate. Higher specialness means collateral scarcity.",
        spread("SOFR", "TGCRRATE"), liquidity_type=COLLATERAL,
    ),
    _secondary(
        "RRP_DELTA", "RRP Usage Delta",
        "Daily change in Total RRP Usage.",
        lag_diff("RRP_USAGE"), fmt=FormatHint.CURRENCY,
    ),
    _secondary(
        "RRP_LESS_RESERVES", "Total RRP - Reserves",
        "Difference between RRP volume and Bank Reserves. Shift in the liability "
        "composition of the Fed balance sheet.",
        spread("RRP_USAGE", "BANK_RESERVES"), fmt=FormatHint.CURRENCY,
    ),
    _secondary(
        "RRP_FED_SPREAD", "ON RRP - Fed Funds",
        "Spread between RRP rate and Fed Funds.",
        spread("RRPONTSYOFFR", "FEDFUNDS"),
    ),
    _secondary(
        "CP_DTB3_SPREAD", "3M CP - 3M T-Bill",
        "Credit spread: 3M Commercial Paper vs 3M T-Bill. Private sector credit stress.",
        spread("CP_RATE", "DTB3"),
    ),
    _secondary(
        "CP_FED_SPREAD", "3M CP - Fed Funds",
        "Spread between Commercial Paper and the Fed policy rate.",
        spread("CP_RATE", "FEDFUNDS"),
    ),
    _secondary(
        "CP_SOFR_SPREAD", "3M CP - SOFR",
        "Spread between Commercial Paper and SOFR.",
        spread("CP_RATE", "SOFR"),
    ),
    _secondary(
        "CD_DTB3_SPREAD", "3M CD - 3M T-Bill",
        "Spread between 3M CD and 3M Treasury Bill. Bank credit risk vs risk-free.",
        spread("CD_3M", "DTB3"),
    ),
    _secondary(
        "CD_SOFR_SPREAD", "3M CD - SOFR",
        "Spread between 3M CD and SOFR. Term unsecured bank funding vs overnight secured.",
        spread("CD_3M", "SOFR"),
    ),
    _secondary(
        "CD_FED_SPREAD", "3M CD - Fed Funds",
        "Spread between 3M CD and the Effective Fed Funds Rate.",
        spread("CD_3M", "FEDFUNDS"),
    ),
    _secondary(
        "DTB3_FED_SPREAD", "3M T-Bill - Fed Funds",
        "Market pricing of near-term rate expectations relative to current policy.",
        spread("DTB3", "FEDFUNDS"), liquidity_type=MARKET,
    ),
    _secondary(
        "DTB3_RRP_SPREAD", "3M T-Bill - ON RRP",
        "Spread between Bills and the RRP floor.",
        spread("DTB3", "RRPONTSYOFFR"), liquidity_type=MARKET,
    ),
    _secondary(
        "REPO_FAILS_GC_RATIO", "Repo Fails / GC Vol",
        "Ratio of Fails to Total Volume. Indicator of market dysfunction.",
        ratio("REPO_FAILS", "TGCRVOLUME"), fmt=FormatHint.PERCENT,
        liquidity_type=COLLATERAL, scale=100,
    ),

    # ===== Dealer statistics: primary =====
    _primary(
        "DEALER_POS_TBILLS", "Dealer Net: T-Bills",
        "Primary Dealer Net Positioning in Treasury Bills. Converted to Billions.",
        FormatHint.CURRENCY, fred_id="PALUMTSTB", liquidity_type=MARKET,
        section=DEALERS, scale=TO_BILLIONS,
    ),
    _primary(
        "DEALER_POS_COUPONS", "Dealer Net: Coupons",
        "Primary Dealer Net Positioning in Treasury Coupons. Converted to Billions.",
        FormatHint.CURRENCY, fred_id="PALUMTSCO", liquidity_type=MARKET,
        section=DEALERS, scale=TO_BILLIONS,
    ),
    _primary(
        "DEALER_POS_FRN", "Dealer Net: FRNs",
        "Primary Dealer Net Positioning in Floating Rate Notes. Converted to Billions.",
        FormatHint.CURRENCY, fred_id="PALUMTSFR", liquidity_type=MARKET,
        section=DEALERS, scale=TO_BILLIONS,
    ),
    _primary(
        "DEALER_POS_TIPS", "Dealer Net: TIPS",
        "Primary Dealer Net Positioning in TIPS. Converted to Billions.",
        FormatHint.CURRENCY, fred_id="PALUMTSII", liquidity_type=MARKET,
        section=DEALERS, scale=TO_BILLIONS,
    ),
    _primary(
        "DEALER_POS_MBS", "Dealer Net: MBS",
        "Primary Dealer Net Positioning in Agency MBS. Converted to Billions.",
        FormatHint.CURRENCY, fred_id="PALUMTSAM", liquidity_type=MARKET,
        section=DEALERS, scale=TO_BILLIONS,
    ),
    # No FRED series; CSV only
    _primary(
        "DEALER_REPO_IN", "Dealer Reverse Repo (In)",
        "Securities In (Reverse Repo). Total collateral received by dealers.",
        FormatHint.CURRENCY, liquidity_type=COLLATERAL, section=DEALERS,
    ),
    _primary(
        "DEALER_REPO_OUT", "Dealer Repo (Out)",
        "Securities Out (Repo). Total collateral pledged by dealers.",
        FormatHint.CURRENCY, section=DEALERS,
    ),
    _primary(
        "DEALER_ASSETS", "Dealer Total Assets",
        "Total Assets of Primary Dealers. Converted to Billions.",
        FormatHint.CURRENCY, fred_id="BOGZ1FL664090005Q", liquidity_type=MARKET,
        section=DEALERS, scale=TO_BILLIONS,
    ),
    _primary(
        "DEALER_EQUITY", "Dealer Total Equity",
        "Total Equity of Primary Dealers. Converted to Billions.",
        FormatHint.CURRENCY, fred_id="BOGZ1FL665080005Q", liquidity_type=MARKET,
        section=DEALERS, scale=TO_BILLIONS,
    ),
    _primary(
        "DEALER_VOL_UST", "Dealer Volume: UST",
        "Weekly Trading Volume of US Treasuries by Primary Dealers. Converted to Billions.",
        FormatHint.CURRENCY, fred_id="ADVPDPUSTT", liquidity_type=MARKET,
        section=DEALERS, scale=TO_BILLIONS,
    ),
    _primary(
        "DEALER_VOL_MBS", "Dealer Volume: MBS",
        "Weekly Trading Volume of Agency MBS by Primary Dealers. Converted to Billions.",
        FormatHint.CURRENCY, fred_id="ADVPDPAMBSTT", liquidity_type=MARKET,
        section=DEALERS, scale=TO_BILLIONS,
    ),

    # ===== Dealer statistics: secondary =====
    _secondary(
        "DEALER_LEVERAGE", "Dealer Leverage",
        "Dealer Leverage Ratio = Total Assets / Total Equity. Balance sheet constraints.",
        ratio("DEALER_ASSETS", "DEALER_EQUITY"), fmt=FormatHint.RATIO,
        liquidity_type=MARKET, section=DEALERS,
    ),
    _secondary(
        "DEALER_TURNOVER_UST", "Inventory Turnover: UST",
        "Weekly UST Volume / |T-Bill Net Position|. Balance sheet velocity.",
        ratio("DEALER_VOL_UST", "DEALER_POS_TBILLS", absolute=True),
        fmt=FormatHint.RATIO, liquidity_type=MARKET, section=DEALERS,
    ),
    _secondary(
        "DEALER_TURNOVER_MBS", "Inventory Turnover: MBS",
        "Weekly MBS Volume / |MBS Net Position|. Balance sheet velocity.",
        ratio("DEALER_VOL_MBS", "DEALER_POS_MBS", absolute=True),
        fmt=FormatHint.RATIO, liquidity_type=MARKET, section=DEALERS,
    ),
]


def get_definition(metric_id: str, catalog: list[MetricDefinition] | None = None) -> MetricDefinition:
    """Look up a definition by id."""
    for definition in catalog if catalog is not None else METRICS:
        if definition.id == metric_id:
            return definition
    raise KeyError(f"Unknown metric: {metric_id}")


def primary_metrics(catalog: list[MetricDefinition] | None = None) -> list[MetricDefinition]:
    return [
        d for d in (catalog if catalog is not None else METRICS)
        if d.category is MetricCategory.PRIMARY
    ]


def secondary_metrics(catalog: list[MetricDefinition] | None = None) -> list[MetricDefinition]:
    return [
        d for d in (catalog if catalog is not None else METRICS)
        if d.category is MetricCategory.SECONDARY
    ]
