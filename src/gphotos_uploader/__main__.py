from gphotos_uploader.cli import app

app()
