from feeld.cli import cli

cli()
