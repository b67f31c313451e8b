"""
Export module: plain-record views and CSV output.
"""
from .csv_export import holdings_records, trade_records, metrics_record, export_csv

__all__ = ['holdings_records', 'trade_records', 'metrics_record', 'export_csv']
