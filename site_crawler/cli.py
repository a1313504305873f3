#!/usr/bin/env python3
"""
Точка входа для запуска краулера SiteCrawler через командную строку.

Команды:
  crawl     Обойти хост, сохранить страницы и вывести число обработанных адресов
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (по умолчанию configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Команда crawl опции:
  --host, -H URL          Стартовый URL (хост обязателен)
  --duration, -t SEC      Длительность запуска в секундах
  --workers, -w N         Число воркеров
  --queue-size, -q N      Ёмкость очереди
  --output, -o DIR        Куда сохранять страницы
  --request-timeout SEC   Таймаут одного запроса
  --json, -j PATH         Сохранить JSON-отчёт в файл

Пример:
  site-crawler crawl --host https://www.example.com -t 10 --json crawl.json
"""
import asyncio
import sys
from pathlib import Path

import click

from site_crawler import __version__
from site_crawler.config import load_config, with_overrides
from site_crawler.engine import start_crawl
from site_crawler.logger import DEFAULT_FORMAT, init_logging
from site_crawler.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteCrawler, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SiteCrawler CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option('--host', '-H', 'target', default=None, help='Стартовый URL, например https://www.example.com')
@click.option('--duration', '-t', 'duration', type=int, default=None, help='Длительность запуска (секунд)')
@click.option('--workers', '-w', 'workers', type=int, default=None, help='Число воркеров')
@click.option('--queue-size', '-q', 'queue_size', type=int, default=None, help='Ёмкость очереди адресов')
@click.option(
    '--output', '-o', 'output_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Корневая папка для сохранённых страниц'
)
@click.option('--request-timeout', 'request_timeout', type=float, default=None, help='Таймаут одного запроса (секунд)')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.pass_context
def crawl(ctx, target, duration, workers, queue_size, output_dir, request_timeout, json_output):
    """Обойти хост в течение заданного времени."""
    try:
        cfg = with_overrides(
            ctx.obj['config'],
            target=target,
            duration=duration,
            workers=workers,
            queue_size=queue_size,
            output_dir=output_dir,
            request_timeout=request_timeout,
        )
    except Exception as e:
        print_error(f'Ошибка конфигурации: {e}')

    report = asyncio.run(start_crawl(cfg))
    click.echo(f'total in {cfg.duration} seconds = {report.claimed}')

    if json_output:
        try:
            saved_json = render_json(report, json_output)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
