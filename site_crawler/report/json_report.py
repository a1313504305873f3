# site_crawler/report/json_report.py

"""
Генерация JSON-отчёта для проекта SiteCrawler.

Сериализация объекта CrawlReport в файл.
"""
from pathlib import Path

from site_crawler.crawler.models import CrawlReport


def render_json(report: CrawlReport, output_path: Path | str) -> Path:
    """
    Сохраняет отчёт report в формате JSON по указанному пути.

    :param report: объект CrawlReport с итогами запуска
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from site_crawler.report.json_report import render_json
    report_path = render_json(report, 'reports/crawl.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    output.write_text(report.json(pretty=True), encoding="utf-8")

    return output
