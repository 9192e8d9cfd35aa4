import logging
from importlib.util import module_from_spec, spec_from_file_location
from pathlib import Path
from typing import Iterator

from fastapi import APIRouter

logger = logging.getLogger(__name__)

ROUTER_GLOB = "*.router.py"


def collect_routers(directory: Path) -> Iterator[tuple[str, APIRouter]]:
    """
    Imports every *.router.py file in the directory (sorted by name) and yields
    the `router` each one defines. Files without an APIRouter are skipped.
    """
    for router_file in sorted(directory.glob(ROUTER_GLOB)):
        # "admin.router.py" -> importable name "admin_router"
        module_name = router_file.name[: -len(".py")].replace(".", "_")
        module_spec = spec_from_file_location(module_name, router_file)
        if module_spec is None or module_spec.loader is None:
            logger.warning("Skipping %s: not importable", router_file.name)
            continue

        module = module_from_spec(module_spec)
        module_spec.loader.exec_module(module)

        sub_router = getattr(module, "router", None)
        if not isinstance(sub_router, APIRouter):
            logger.warning("Skipping %s: no APIRouter named 'router'", router_file.name)
            continue
        yield router_file.name, sub_router


# every endpoint lives under /api
router = APIRouter(prefix="/api")

for name, sub_router in collect_routers(Path(__file__).resolve().parent):
    router.include_router(sub_router)
    logger.debug("Mounted %s", name)
