from django.core.management.base import BaseCommand
from base.models import TeamMember, TeamRole
from base.auth import JwtAuthentication


class Command(BaseCommand):
    help = "Create an admin team member or generate a JWT for an existing member"

    def add_arguments(self, parser):
        parser.add_argument("--create-admin", action="store_true", help="Create a new admin")
        parser.add_argument("--email", type=str, help="Member email")
        parser.add_argument("--password", type=str, help="Password for the new admin")
        parser.add_argument("--name", type=str, default="", help="Display name")
        parser.add_argument("--api-key", type=str, help="Generate JWT for a member by email")

    def _print_api_key(self, member):
        token = JwtAuthentication().generate_jwt_token(member)
        self.stdout.write(self.style.SUCCESS(f"JWT Token: {token}"))

    def handle(self, *args, **options):
        if options["create_admin"]:
            email = options["email"] or input("Enter Email: ")
            password = options["password"] or input("Enter Password: ")
            name = options["name"] or email.split("@")[0]
            if TeamMember.objects.filter(email__iexact=email).exists():
                self.stderr.write(self.style.ERROR("A member with this email already exists."))
                return
            member = TeamMember.objects.create_member(
                email=email, password=password, name=name, role=TeamRole.ADMIN
            )
            self.stdout.write(self.style.SUCCESS(f"Admin {member.email} created successfully."))
            self._print_api_key(member)
        elif options["api_key"]:
            try:
                member = TeamMember.objects.get_by_email(options["api_key"])
                self._print_api_key(member)
            except TeamMember.DoesNotExist:
                self.stderr.write(self.style.ERROR("Member not found."))
        else:
            self.stderr.write(self.style.ERROR("Invalid arguments."))
