"""
Global configuration constants for the site audit pipeline.
All tunable thresholds live here.
"""

# ── Meta thresholds ───────────────────────────────────────────────────────────
TITLE_MIN_CHARS = 30
TITLE_MAX_CHARS = 60
DESCRIPTION_MIN_CHARS = 50
DESCRIPTION_MAX_CHARS = 160

# ── Content thresholds ────────────────────────────────────────────────────────
LOW_WORD_COUNT = 100
THIN_CONTENT_WORD_COUNT = 300
MAX_URL_PATH_CHARS = 80

# ── Batch orchestration ───────────────────────────────────────────────────────
BATCH_SIZE = 50
CONCURRENT_BATCHES = 3
DEFAULT_MAX_WORKERS = 10
DEFAULT_MAX_PAGES = 10000
DEFAULT_REQUEST_TIMEOUT = 8             # seconds, per outbound fetch
DEFAULT_USER_AGENT = (
    "SiteAuditBot/1.0 (+https://github.com/site-audit-tool)"
)

# ── Sitemap discovery ─────────────────────────────────────────────────────────
SITEMAP_MAX_URLS = 50_000
SITEMAP_MAX_DEPTH = 5                   # max sitemap-index nesting depth
FALLBACK_SITEMAP_PATHS = [
    "/sitemap_index.xml",
    "/sitemap-index.xml",
    "/sitemaps.xml",
    "/sitemap1.xml",
    "/sitemaps/sitemap.xml",
]

# ── Result cache ──────────────────────────────────────────────────────────────
CACHE_DIR = ".cache"
SITEMAP_CACHE_TTL_SECONDS = 24 * 60 * 60
REPORT_CACHE_TTL_SECONDS = 60 * 60
MEMORY_CACHE_MAX_ENTRIES = 50

# ── SEO pillars (category → pillar) ───────────────────────────────────────────
CATEGORY_PILLARS: dict[str, str] = {
    "Technical":        "Technical SEO",
    "Crawl directives": "Technical SEO",
    "Security":         "Technical SEO",
    "Metadata":         "On-page SEO",
    "Headings":         "On-page SEO",
    "Images":           "On-page SEO",
    "Content":          "On-page SEO",
    "Structured data":  "On-page SEO",
    "Social":           "On-page SEO",
    "Trust":            "On-page SEO",
    "Links":            "Link building",
}
DEFAULT_PILLAR = "On-page SEO"

# ── Concrete fix examples, keyed by finding title ─────────────────────────────
FIX_EXAMPLES: dict[str, str] = {
    "Missing page title": "<title>Your page title here (30-60 chars) | Brand</title>",
    "Missing meta description": '<meta name="description" content="What this page is about, 50-160 chars.">',
    "Title too short": "Add keywords and the brand, e.g. Product name – Short description | Brand",
    "Title too long": "Trim the title to under 60 characters. Search engines truncate longer titles.",
    "Meta description too short": "Write 1-2 sentences that describe the content and invite the click.",
    "Meta description too long": "Shorten to at most 160 characters. Keep the call to action and keywords.",
    "Missing viewport": '<meta name="viewport" content="width=device-width, initial-scale=1">',
    "Missing H1": "Use a single <h1> with the page's main topic, e.g. <h1>Category or product name</h1>",
    "Multiple H1 headings": "Keep a single H1. Use H2 for subheadings.",
    "No H2 headings": "Split the content with <h2> subheadings for readability and SEO.",
    "Missing language (lang)": '<html lang="en">',
    "Missing canonical URL": '<link rel="canonical" href="https://example.com/this-page">',
    "Missing og:title": '<meta property="og:title" content="Same as or extended page title">',
    "Missing og:description": '<meta property="og:description" content="Short text used when shared">',
    "Missing og:image": '<meta property="og:image" content="https://example.com/image.jpg">',
    "Missing twitter:card": '<meta name="twitter:card" content="summary_large_image">',
    "Images without alt text": '<img src="x.jpg" alt="Description of the image">',
    "Images without dimensions": "Set width and height on <img> to avoid layout shift.",
    "No JSON-LD": 'Add <script type="application/ld+json"> with an Organization or Product schema.',
    "Missing favicon": '<link rel="icon" href="/favicon.ico" sizes="32x32">',
    "Long URL": "Use short, readable URLs. Drop unnecessary parameters.",
    "Uppercase letters in URL": "Use lowercase-only URLs (e.g. /product-name).",
    "robots.txt unavailable": "Create /robots.txt with: Sitemap: https://example.com/sitemap.xml",
    "No sitemap in robots.txt": "Add the line: Sitemap: https://example.com/sitemap.xml",
    "Not HTTPS": "Enable an SSL certificate with your host (Let's Encrypt or the host's own).",
    "Noindex": "Remove noindex from meta robots if the page should be indexed.",
}
