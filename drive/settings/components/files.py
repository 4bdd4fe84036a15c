"""Upload rules shared by the API and the folder sync client."""

from decouple import Csv

from drive.settings.components import config

# Largest accepted upload, in megabytes
MAX_UPLOAD_SIZE_MB = config('MAX_UPLOAD_SIZE_MB', cast=int, default=50)

# Extensions without dot, compared case-insensitively. Empty accepts all.
ALLOWED_FILE_EXTENSIONS = config(
    'ALLOWED_FILE_EXTENSIONS',
    cast=Csv(post_process=tuple),
    default=(
        'jpg,jpeg,png,gif,bmp,txt,md,pdf,doc,docx,'
        'py,c,cpp,cs,js,html,css,zip,rar,7z'
    ),
)

# Let Django spool uploads above this size to a temporary file
FILE_UPLOAD_MAX_MEMORY_SIZE = 2 * 1024 * 1024
