from shopnexus import create_app

app = create_app()
