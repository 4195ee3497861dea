from transcache.cli import app

app()
