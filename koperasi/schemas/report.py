from .common import PeriodFilter


class ReportQuery(PeriodFilter):
    pass
