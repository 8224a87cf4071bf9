def main() -> None:
    """Entry point for the application.

    Starts the API development server.
    """
    from resumify.api.main import main as api_main

    api_main()
