"""
Django settings for the editorsite project.

All deployment-specific values are read from the environment so the same
module serves development, CI and production.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "insecure-development-key")
DEBUG = os.environ.get("DJANGO_DEBUG", "False").lower() in ("1", "true", "yes")
ALLOWED_HOSTS = [
    h.strip()
    for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")
    if h.strip()
]

# Canonical site URL used to build absolute links to assets
SITE_URL = os.environ.get("SITE_URL", "")

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "tinymce",
    "assets",
    "cms",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "editorsite.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "editorsite.wsgi.application"

# Database: PostgreSQL when DB_NAME is set, SQLite otherwise
if os.environ.get("DB_NAME"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ["DB_NAME"],
            "USER": os.environ.get("DB_USER", ""),
            "PASSWORD": os.environ.get("DB_PASSWORD", ""),
            "HOST": os.environ.get("DB_HOST", "localhost"),
            "PORT": os.environ.get("DB_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# Editor assets (files and images referenced from HTML content)
ASSETS_URL = "/assets/"
ASSETS_ROOT = BASE_DIR / "public" / "assets"

GS_BUCKET_NAME = os.environ.get("GS_BUCKET_NAME", "")

if GS_BUCKET_NAME:
    STORAGES = {
        "default": {"BACKEND": "editorsite.storage_backends.AssetsGCS"},
        "staticfiles": {"BACKEND": "editorsite.storage_backends.StaticRootGCS"},
        "assets": {"BACKEND": "editorsite.storage_backends.AssetsGCS"},
    }
else:
    STORAGES = {
        "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
        "staticfiles": {
            "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"
        },
        "assets": {
            "BACKEND": "django.core.files.storage.FileSystemStorage",
            "OPTIONS": {"location": ASSETS_ROOT, "base_url": ASSETS_URL},
        },
    }

# Ordered (pattern, replacement) pairs applied to uploaded file names
ASSETS_FILENAME_REPLACEMENTS = [
    (r"\s", "-"),  # remove whitespace
    (r"_", "-"),  # underscores to dashes
    (r"[^A-Za-z0-9+.\-]+", ""),  # only allow alphanumeric plus dash and dot
    (r"[\-]{2,}", "-"),  # remove duplicate dashes
    (r"^[\.\-_]+", ""),  # remove all leading dots, dashes or underscores
]

ASSETS_IMAGE_EXTENSIONS = ["jpg", "jpeg", "png", "gif", "webp"]

# --- TinyMCE / HTML editor ---

TINYMCE_DEFAULT_CONFIG = {
    "height": 500,
    "menubar": False,
    "plugins": "advlist autolink lists link image charmap anchor searchreplace "
    "visualblocks code fullscreen media table",
    "toolbar": "undo redo | blocks | bold italic | alignleft aligncenter alignright | "
    "bullist numlist outdent indent | link anchor image media | code",
    # Keep user-entered URLs exactly as typed
    "relative_urls": False,
    "remove_script_host": True,
    "convert_urls": False,
    "valid_elements": (
        "@[id|class|style|title],"
        "a[id|rel|rev|dir|tabindex|accesskey|type|name|href|target|title|class],"
        "-strong/-b[class],-em/-i[class],-strike[class],-u[class],"
        "#p[id|dir|class|align|style],-ol[class],-ul[class],-li[class],br,"
        "img[id|dir|longdesc|usemap|class|src|border|alt=|title|width|height|align|data*],"
        "-sub[class],-sup[class],-blockquote[dir|class],-cite[dir|class|id|title],"
        "-table[cellspacing|cellpadding|width|height|class|align|summary|dir|id|style],"
        "-tr[id|dir|class|rowspan|width|height|align|valign|bgcolor|background|bordercolor|style],"
        "tbody[id|class|style],thead[id|class|style],tfoot[id|class|style],"
        "#td[id|dir|class|colspan|rowspan|width|height|align|valign|scope|style],"
        "-th[id|dir|class|colspan|rowspan|width|height|align|valign|scope|style],"
        "caption[id|dir|class],-div[id|dir|class|align|style],"
        "-span[class|align|style],-pre[class|align],address[class|align],"
        "-h1[id|dir|class|align|style],-h2[id|dir|class|align|style],"
        "-h3[id|dir|class|align|style],-h4[id|dir|class|align|style],"
        "-h5[id|dir|class|align|style],-h6[id|dir|class|align|style],hr[class],"
        "dd[id|class|title|dir],dl[id|class|title|dir],dt[id|class|title|dir]"
    ),
    "extended_valid_elements": (
        "img[class|src|alt|title|hspace|vspace|width|height|align|name|usemap|data*],"
        "iframe[src|name|width|height|align|frameborder|marginwidth|marginheight|"
        "scrolling|allow|allowfullscreen|referrerpolicy|title],"
        "object[width|height|data|type],param[name|value],"
        "map[class|name|id],area[shape|coords|href|target|alt]"
    ),
}

# Named editor configurations, merged over TINYMCE_DEFAULT_CONFIG
HTMLEDITOR_CONFIGS = {
    "cms": {},
    "basic": {
        "toolbar": "bold italic | link",
        "valid_elements": "-p,br,-strong/-b,-em/-i,a[href|target|title]",
        "extended_valid_elements": "",
    },
}
HTMLEDITOR_ACTIVE_CONFIG = "cms"
HTMLEDITOR_SANITISE_SERVER_SIDE = True

# Remote file references accepted by the editor toolbar
HTMLEDITOR_FILEURL_SCHEME_WHITELIST = ["http", "https"]
HTMLEDITOR_FILEURL_DOMAIN_WHITELIST = [
    "youtube.com",
    "www.youtube.com",
    "vimeo.com",
    "www.vimeo.com",
]
HTMLEDITOR_OEMBED_PROVIDERS = {
    "youtube.com": "https://www.youtube.com/oembed",
    "www.youtube.com": "https://www.youtube.com/oembed",
    "vimeo.com": "https://vimeo.com/api/oembed.json",
    "www.vimeo.com": "https://vimeo.com/api/oembed.json",
}
HTMLEDITOR_REMOTE_TIMEOUT = 10

LOGIN_URL = "/admin/login/"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "[{levelname}] {name}: {message}", "style": "{"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "assets": {
            "handlers": ["console"],
            "level": os.environ.get("ASSETS_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "cms": {
            "handlers": ["console"],
            "level": os.environ.get("CMS_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
