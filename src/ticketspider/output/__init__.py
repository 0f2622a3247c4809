"""结果输出：CSV 与邮件通知"""

from .csv_export import csv_path_for, read_price_table, read_results_csv, write_results_csv
from .notifier import MailNotifier, render_tables

__all__ = [
    "csv_path_for",
    "read_price_table",
    "read_results_csv",
    "write_results_csv",
    "MailNotifier",
    "render_tables",
]
