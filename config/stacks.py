"""Technology stack handed to the requirements analyst and the developer."""

from core.state import TechStack

DEFAULT_TECH_STACK = TechStack(
    frontend="Next.js",
    backend="Next.js API Routes",
    database="SQLite",
    orm="Prisma",
)


def format_tech_stack(stack: TechStack) -> str:
    return (
        f"- Frontend: {stack.frontend}\n"
        f"- Backend: {stack.backend}\n"
        f"- Database: {stack.database}\n"
        f"- ORM: {stack.orm}"
    )
