import os


class Config:
    # Vercel Blob store
    BLOB_READ_WRITE_TOKEN = os.environ.get('BLOB_READ_WRITE_TOKEN', '')
    BLOB_API_URL = os.environ.get('BLOB_API_URL', 'https://blob.vercel-storage.com')
    BLOB_API_VERSION = os.environ.get('BLOB_API_VERSION', '7')
    BLOB_TIMEOUT = int(os.environ.get('BLOB_TIMEOUT', '30'))

    # Upload configuration
    MAX_FILE_SIZE = int(os.environ.get('MAX_FILE_SIZE', 200 * 1024))  # 200KB per image
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB

    # Admin credentials (basic auth on the read endpoints)
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME', 'admin')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'password')

    # The form is served from another origin
    CORS_ORIGIN = os.environ.get('CORS_ORIGIN', '*')

    PORT = int(os.environ.get('PORT', 3000))
