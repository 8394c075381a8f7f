"""
Script de lancement du serveur API.

Démarre l'application FastAPI avec uvicorn sur l'hôte et le port configurés (`APP_HOST`,
`APP_PORT`, ou `PORT` si défini par l'hébergeur).
"""

import os

import uvicorn

from vetstock.app.main import app
from vetstock.core.container import container


def main():
    """Point d'entrée principal du serveur."""
    settings = container.settings
    port = int(os.environ.get("PORT", settings.APP_PORT))
    uvicorn.run(app, host=settings.APP_HOST, port=port, reload=False)


if __name__ == "__main__":
    main()
