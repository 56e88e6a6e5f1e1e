"""Run the Expense Manager server: python3 -m expensemanager"""

import uvicorn

from expensemanager.config import settings


def main() -> None:
    uvicorn.run("expensemanager.api.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
