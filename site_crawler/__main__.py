from site_crawler.cli import cli

if __name__ == "__main__":
    cli()
