def main() -> None:
    """Entry point for the application: run the API development server."""
    from interview_board.api.main import main as api_main

    api_main()
