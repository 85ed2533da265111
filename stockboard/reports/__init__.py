from .period import Period, available_years, select_by_period
from .summary import FinancialSummary, compute_summary, format_summary_text, rank_by_profit, revenue_cost_rows
from .export import export_records_csv, export_summary_xlsx, to_delimited_text, write_report_files

__all__ = [
    "Period",
    "available_years",
    "select_by_period",
    "FinancialSummary",
    "compute_summary",
    "format_summary_text",
    "rank_by_profit",
    "revenue_cost_rows",
    "export_records_csv",
    "export_summary_xlsx",
    "to_delimited_text",
    "write_report_files",
]
