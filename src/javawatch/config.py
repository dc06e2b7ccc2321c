import os

# Product tracked by the archive document
PRODUCT_NAME = "Java"

# Archive file written into the output directory
OUTPUT_FILENAME = f"{PRODUCT_NAME}.json"

# Page listing every Java 8 download with its platform label
SOURCE_URL = os.environ.get("JAVAWATCH_SOURCE_URL", "https://www.java.com/en/download/manual.jsp")

# Output directory for the archive, snapshots and run journal
OUTPUT_DIR = os.environ.get("JAVAWATCH_OUTPUT_DIR", "output")

# Directory for log files
LOG_DIR = os.environ.get("JAVAWATCH_LOG_DIR", "logs")

# Page-load timeout for a single fetch attempt
PAGE_TIMEOUT = float(os.environ.get("JAVAWATCH_PAGE_TIMEOUT", "60"))  # seconds

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/127.0.0.0 Safari/537.36"
)

FETCHERS = ("browser", "http")
