"""Entry point for running the randraw service."""
from __future__ import annotations

import os

import uvicorn

from randraw.infra.instrumentation import configure_instrumentation


def main() -> None:
    """Run the randraw service."""
    port = int(os.environ.get('PORT', '8000'))
    host = os.environ.get('HOST', '0.0.0.0')

    configure_instrumentation(service_name='randraw-service')
    uvicorn.run(
        'randraw.service.app:create_app',
        factory=True,
        host=host,
        port=port,
        reload=os.environ.get('RELOAD', 'false').lower() == 'true',
    )


if __name__ == '__main__':
    main()
