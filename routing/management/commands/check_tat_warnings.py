from django.core.management.base import BaseCommand

from routing.tat import check_tat_warnings


class Command(BaseCommand):
    help = "Sends warnings for files whose SLA deadline falls inside the warning window."

    def handle(self, *args, **options):
        warned, failed = check_tat_warnings()
        self.stdout.write(self.style.SUCCESS(f"Sent {warned} TAT warning(s), {failed} failed."))
        if failed:
            self.stderr.write(f"{failed} file(s) could not be warned; see the log for details.")
