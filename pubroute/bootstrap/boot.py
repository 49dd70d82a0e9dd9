from pubroute.bootstrap.config.loader import get_cli_args
from pubroute.bootstrap.deps import get_worker
from pubroute.core.helpers.utils import setup_signal_handler, setup_logging, scan


@scan("pubroute.bootstrap.processors")
def main():
    cli = get_cli_args()
    setup_logging(cli.log_level)

    worker = get_worker()
    loop = worker.loop

    try:
        with setup_signal_handler(worker.shutdown):
            loop.run_until_complete(worker.start())
    except KeyboardInterrupt:
        pass
    finally:
        try:
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.run_until_complete(loop.shutdown_default_executor())
        finally:
            loop.close()


if __name__ == "__main__":
    main()
