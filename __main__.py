# __main__.py

from staticsite.config import load_site_config
from staticsite.logging import setup_logging
from staticsite.plan import build_site_graph
from staticsite.publisher import Publisher
from staticsite.web import declare_site, export_endpoints

# ---------------------------------------------------------------------------
# 1) CONFIG
# ---------------------------------------------------------------------------
config = load_site_config()
setup_logging(config.log_level)

# ---------------------------------------------------------------------------
# 2) FILES
#    Fails before anything is declared if the build directory is missing.
# ---------------------------------------------------------------------------
units = Publisher(config.fingerprint_mode).enumerate(config.source_dir)

# ---------------------------------------------------------------------------
# 3) RESOURCES
#    Bucket-only website, or private bucket + CloudFront distribution
# ---------------------------------------------------------------------------
graph = build_site_graph(config, units)
resources = declare_site(graph)

# ---------------------------------------------------------------------------
# 4) EXPORTS
#    bucket_name, plus website_url or cdn_url depending on the topology
# ---------------------------------------------------------------------------
export_endpoints(resources)
