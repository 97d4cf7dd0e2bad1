import os
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("SHOPIFY_CLIENT_ID", "test_client_id")
os.environ.setdefault("SHOPIFY_CLIENT_SECRET", "test_secret")
os.environ.setdefault("SHOPIFY_SCOPES", "write_pixels,read_customer_events")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.pop("PUBLIC_HOSTNAME", None)
os.environ.pop("RENDER_EXTERNAL_HOSTNAME", None)
