"""site_crawler.crawler: очередь, дедупликация, воркеры и компоненты обработки страницы."""
