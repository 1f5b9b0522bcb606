from koperasi import create_app

app = create_app()
