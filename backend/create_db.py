"""
Crée les tables de la base configurée par DATABASE_URL.
Usage : python create_db.py (depuis le dossier backend/)
"""

import logging

from tutorhub.database import init_db

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logger.info("Création des tables…")
    init_db()
    logger.info("Tables créées.")
