"""Ready-made distributions built on ETF tables, plus a Ziggurat baseline."""

from etfdist.distributions.chi_squared import (
    ChiSquaredOuterDistribution,
    ChiSquaredOuterPdf,
    ChiSquaredPdf,
    EtfChiSquaredDistribution,
    EtfChiSquaredLowDofDistribution,
)
from etfdist.distributions.normal import (
    EtfNormalDistribution,
    NormalTailDistribution,
    default_normal_xtail,
    normal_dpdf,
    normal_pdf,
    normal_tail_area,
)
from etfdist.distributions.weibull import WeibullPdf, WeibullTailDistribution
from etfdist.distributions.ziggurat import ZigguratNormalDistribution, make_ziggurat_tables

__all__ = [
    "ChiSquaredOuterDistribution",
    "ChiSquaredOuterPdf",
    "ChiSquaredPdf",
    "EtfChiSquaredDistribution",
    "EtfChiSquaredLowDofDistribution",
    "EtfNormalDistribution",
    "NormalTailDistribution",
    "default_normal_xtail",
    "normal_dpdf",
    "normal_pdf",
    "normal_tail_area",
    "WeibullPdf",
    "WeibullTailDistribution",
    "ZigguratNormalDistribution",
    "make_ziggurat_tables",
]
