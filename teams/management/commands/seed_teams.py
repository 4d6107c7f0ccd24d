from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from events.models import Event
from teams import arbiter, store
from teams.exceptions import TeamFormationError
from teams.queries import get_user_team_for_event

User = get_user_model()


class Command(BaseCommand):
    help = "Seeds a demo event with a team and a pending join request"

    def add_arguments(self, parser):
        parser.add_argument("--capacity", type=int, default=4, help="Team size limit for the demo event")

    def handle(self, *args, **options):
        self.stdout.write("Seeding team formation data...")

        # 1. Ensure Users
        users = {}
        for username in ("alice", "bob", "carol"):
            user, created = User.objects.get_or_create(
                username=username,
                defaults={"email": f"{username}@example.com"},
            )
            if created:
                user.set_password("password")
                user.save()
            users[username] = user

        # 2. Event
        event, _ = Event.objects.get_or_create(
            title="Hackathon: Build for Good",
            defaults={"team_capacity": options["capacity"]},
        )
        self.stdout.write(f"Used Event: {event.title} (team capacity {event.team_capacity})")

        # 3. Team led by alice, bob asks to join
        team = get_user_team_for_event(users["alice"].id, event.id)
        if team is None:
            team = store.create_team(
                event.id,
                users["alice"],
                name="Green Coders",
                bio="Building tools for local food banks.",
                roles_required=["Frontend", "Data"],
            )
        self.stdout.write(f"Used Team: {team.name}")

        try:
            join_request = arbiter.request_to_join(team.id, users["bob"], preferred_role="Frontend")
            self.stdout.write(f"Created join request {join_request.id} for bob")
        except TeamFormationError as e:
            self.stdout.write(self.style.WARNING(f"Skipped join request for bob: {e.detail}"))

        self.stdout.write(self.style.SUCCESS("Done."))
