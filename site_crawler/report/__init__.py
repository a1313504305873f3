# File: site_crawler/report/__init__.py
"""site_crawler.report: сохранение итогов запуска, используется CLI и тестами."""

from site_crawler.report.json_report import render_json

__all__ = ["render_json"]
