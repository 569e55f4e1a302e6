import threading

from django.core.management.base import BaseCommand, CommandError

from notifier.listener import TriggerListener
from notifier.triggers import TRIGGERS


class Command(BaseCommand):
    help = "Watch the trigger collections in Firestore and send push notifications for new documents."

    def add_arguments(self, parser):
        parser.add_argument(
            "--collection",
            action="append",
            choices=sorted(TRIGGERS.keys()),
            help="Only watch this collection (repeatable). Defaults to all.",
        )

    def handle(self, *args, **options):
        listener = TriggerListener(collections=options.get("collection"))
        try:
            listener.start()
        except RuntimeError as exc:
            raise CommandError(str(exc))

        self.stdout.write(self.style.SUCCESS(f"Listening on: {', '.join(listener.collections)}"))
        stop = threading.Event()
        try:
            while not stop.wait(1.0):
                pass
        except KeyboardInterrupt:
            self.stdout.write("Shutting down...")
        finally:
            listener.stop()
