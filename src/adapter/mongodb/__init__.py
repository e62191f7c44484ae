import os

USERS_COLLECTION_NAME = os.getenv('USERS_TABLE_NAME', 'speak-greek-now-users')
