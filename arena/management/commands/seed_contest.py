import csv
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from arena.credentials import provision_teams
from arena.models import Challenge, EventConfig


class Command(BaseCommand):
    help = 'Provision team credentials and populate the database with sample CTF data'

    def add_arguments(self, parser):
        parser.add_argument('--teams', type=int, default=250, help='Number of team accounts to provision')
        parser.add_argument('--prefix', default='TEAM', help='Team ID prefix, IDs look like TEAM_001')
        parser.add_argument(
            '--credentials-file',
            help='Write the issued team IDs and tokens to this CSV file; tokens are stored hashed and can not be recovered later',
        )
        parser.add_argument('--no-challenges', action='store_true', help='Skip the sample challenges')
        parser.add_argument('--duration-hours', type=int, default=24, help='Contest length starting now')

    def handle(self, *args, **options):
        self.stdout.write('Creating sample data...')

        config = EventConfig.get_config()
        if config.start_time is None and config.end_time is None:
            now = timezone.now()
            config.event_name = 'CyberArena CTF'
            config.start_time = now
            config.end_time = now + timedelta(hours=options['duration_hours'])
            config.save()
            self.stdout.write(f'Configured event window: {config.start_time:%Y-%m-%d %H:%M} - {config.end_time:%Y-%m-%d %H:%M} UTC')

        if not options['no_challenges']:
            self._create_challenges()

        created = provision_teams(options['teams'], prefix=options['prefix'], first_admin=True)
        self.stdout.write(f'Created {len(created)} team accounts')

        if created and options['credentials_file']:
            with open(options['credentials_file'], 'w', newline='', encoding='utf-8') as f:
                writer = csv.writer(f)
                writer.writerow(['team_id', 'team_name', 'access_token', 'is_admin'])
                for participant, token in created:
                    writer.writerow([participant.team_id, participant.team_name, token, participant.is_admin])
            self.stdout.write(f'Credentials written to {options["credentials_file"]}')
        elif created:
            self.stdout.write(self.style.WARNING(
                'No --credentials-file given; issued tokens are not recoverable.'
            ))

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        if created and created[0][0].is_admin:
            self.stdout.write(f'Admin account: {created[0][0].team_id}')

    def _create_challenges(self):
        challenges_data = [
            {
                'title': 'SQL Injection Basics',
                'description': 'Find the hidden flag in this vulnerable login form. The database contains user credentials and a secret flag.',
                'category': 'Web Exploitation',
                'difficulty': 'easy',
                'points': 100,
                'flag': 'CTF{sql_1nj3ct10n_b4s1cs}',
                'hints': ['Try different SQL injection payloads', 'Look for admin credentials'],
            },
            {
                'title': 'XSS Reflected',
                'description': "Exploit a reflected XSS vulnerability to steal the admin's session cookie.",
                'category': 'Web Exploitation',
                'difficulty': 'medium',
                'points': 200,
                'flag': 'CTF{xss_r3fl3ct3d_att4ck}',
                'hints': ['Check URL parameters', 'Use JavaScript to extract cookies'],
            },
            {
                'title': 'Caesar Cipher Mystery',
                'description': "Decrypt this message: 'PGS{P43F4E_P1CU3E_F0OW3Q}'",
                'category': 'Cryptography',
                'difficulty': 'easy',
                'points': 75,
                'flag': 'CTF{C43S4R_C1PH3R_S0LV3D}',
                'hints': ['Try different shift values', 'The flag format is CTF{...}'],
            },
            {
                'title': 'RSA Small Exponent',
                'description': 'Break this RSA encryption with a small public exponent.',
                'category': 'Cryptography',
                'difficulty': 'hard',
                'points': 400,
                'flag': 'CTF{rs4_sm4ll_3xp0n3nt_4tt4ck}',
                'hints': ['Public exponent is 3', 'Use cube root attack'],
            },
            {
                'title': 'Simple Crackme',
                'description': 'Reverse engineer this binary to find the correct password that reveals the flag.',
                'category': 'Reverse Engineering',
                'difficulty': 'medium',
                'points': 250,
                'flag': 'CTF{r3v3rs3_3ng1n33r1ng}',
                'hints': ['Use a disassembler like Ghidra', 'Look for string comparisons'],
            },
            {
                'title': 'Hidden in Plain Sight',
                'description': 'Find the flag hidden in this image file using steganography techniques.',
                'category': 'Forensics',
                'difficulty': 'easy',
                'points': 125,
                'flag': 'CTF{st3g4n0gr4phy_h1dd3n}',
                'hints': ['Use steganography tools', 'Check image metadata'],
            },
            {
                'title': 'Memory Dump Analysis',
                'description': 'Analyze this memory dump to find the hidden password.',
                'category': 'Forensics',
                'difficulty': 'hard',
                'points': 450,
                'flag': 'CTF{m3m0ry_dump_4n4lys1s}',
                'hints': ['Use Volatility framework', 'Look for passwords in memory'],
            },
            {
                'title': 'Buffer Overflow Basics',
                'description': 'Exploit a simple buffer overflow to control program execution.',
                'category': 'Binary Exploitation',
                'difficulty': 'hard',
                'points': 500,
                'flag': 'CTF{buff3r_0v3rfl0w_pwn3d}',
                'hints': ['Find the buffer size', 'Control EIP/RIP register'],
            },
            {
                'title': 'ROT13 Cipher',
                'description': "Decrypt this ROT13 encoded message: 'PGS{ebg13_vf_fb_rnfl}'",
                'category': 'Cryptography',
                'difficulty': 'easy',
                'points': 50,
                'flag': 'CTF{rot13_is_so_easy}',
                'hints': ['ROT13 shifts letters by 13'],
            },
            {
                'title': 'Race Condition Exploit',
                'description': 'Exploit the race condition in the banking application to withdraw more money than available.',
                'category': 'Binary Exploitation',
                'difficulty': 'hard',
                'points': 400,
                'flag': 'CTF{r4c3_c0nd1t10n_3xpl01t3d}',
                'hints': ['Multiple simultaneous requests', 'Time window exploitation'],
            },
        ]

        for chall_data in challenges_data:
            challenge, created = Challenge.objects.get_or_create(
                title=chall_data['title'],
                defaults={key: value for key, value in chall_data.items() if key != 'title'},
            )
            if created:
                self.stdout.write(f'Created challenge: {challenge.title}')
