"""
Tests for the challenge catalog: participant views never carry flags,
progress is per participant, admin CRUD validates and is admin-only
"""
from arena import catalog
from arena.exceptions import NotFound, PermissionDenied, ValidationError
from arena.models import Challenge
from tests.test_utils import ArenaTestCase, TestDataFactory


class ParticipantCatalogTest(ArenaTestCase):

    def setUp(self):
        super().setUp()
        self.alice = TestDataFactory.create_participant('TEAM_ALICE')
        self.bob = TestDataFactory.create_participant('TEAM_BOB')
        self.web = TestDataFactory.create_challenge('XSS Reflected', points=200, flag='CTF{xss_r3fl3ct3d_att4ck}')
        self.crypto = TestDataFactory.create_challenge('ROT13 Cipher', points=100, flag='CTF{rot13_is_so_easy}',
                                                       category='Cryptography')
        self.hidden = TestDataFactory.create_challenge('Hidden', is_active=False)

    def test_flags_never_exposed(self):
        for item in catalog.list_for_participant(self.alice.pk):
            self.assertNotIn('flag', item)
        self.assertNotIn('flag', catalog.get_for_participant(self.alice.pk, self.web.pk))

    def test_inactive_challenges_hidden(self):
        ids = [c['id'] for c in catalog.list_for_participant(self.alice.pk)]
        self.assertEqual(sorted(ids), sorted([self.web.pk, self.crypto.pk]))
        with self.assertRaises(NotFound):
            catalog.get_for_participant(self.alice.pk, self.hidden.pk)

    def test_progress_is_per_participant(self):
        TestDataFactory.create_wrong_submission(self.alice, self.web)
        TestDataFactory.create_solve(self.alice, self.web)
        TestDataFactory.create_wrong_submission(self.bob, self.web)

        alice_view = catalog.get_for_participant(self.alice.pk, self.web.pk)
        self.assertTrue(alice_view['is_solved'])
        self.assertEqual(alice_view['attempts'], 2)

        bob_view = catalog.get_for_participant(self.bob.pk, self.web.pk)
        self.assertFalse(bob_view['is_solved'])
        self.assertEqual(bob_view['attempts'], 1)

    def test_untouched_challenge_progress(self):
        view = catalog.get_for_participant(self.alice.pk, self.crypto.pk)
        self.assertFalse(view['is_solved'])
        self.assertEqual(view['attempts'], 0)
        self.assertEqual(view['hints'], [])

    def test_unknown_participant(self):
        with self.assertRaises(NotFound):
            catalog.list_for_participant(99999)

    def test_unknown_challenge(self):
        with self.assertRaises(NotFound):
            catalog.get_for_participant(self.alice.pk, 99999)


class AdminCatalogTest(ArenaTestCase):

    def setUp(self):
        super().setUp()
        self.admin = TestDataFactory.create_admin()
        self.player = TestDataFactory.create_participant('TEAM_001')
        self.payload = {
            'title': 'Buffer Overflow 101',
            'description': 'Overflow the buffer to get the flag.',
            'category': 'Binary Exploitation',
            'difficulty': 'hard',
            'points': 400,
            'flag': 'CTF{buff3r_0v3rfl0w_pwn}',
            'hints': ['Find the buffer size'],
        }

    def test_create_challenge(self):
        challenge = catalog.create_challenge(self.admin, self.payload)
        self.assertEqual(challenge.points, 400)
        self.assertTrue(challenge.is_active)
        self.assertEqual(challenge.hints, ['Find the buffer size'])

    def test_create_applies_defaults(self):
        del self.payload['difficulty']
        del self.payload['hints']
        challenge = catalog.create_challenge(self.admin, self.payload)
        self.assertEqual(challenge.difficulty, 'medium')
        self.assertEqual(challenge.hints, [])

    def test_create_rejects_bad_fields(self):
        cases = [
            ('points', 0),
            ('points', -50),
            ('flag', 'not_a_flag'),
            ('flag', ''),
            ('title', '   '),
            ('difficulty', 'impossible'),
            ('hints', 'not a list'),
        ]
        for field, value in cases:
            with self.subTest(field=field, value=value):
                payload = dict(self.payload, **{field: value})
                with self.assertRaises(ValidationError) as ctx:
                    catalog.create_challenge(self.admin, payload)
                self.assertIn(field, ctx.exception.field_errors)
        self.assertEqual(Challenge.objects.count(), 0)

    def test_update_is_partial(self):
        challenge = catalog.create_challenge(self.admin, self.payload)
        catalog.update_challenge(self.admin, challenge.pk, {'points': 450})
        challenge.refresh_from_db()
        self.assertEqual(challenge.points, 450)
        self.assertEqual(challenge.flag, 'CTF{buff3r_0v3rfl0w_pwn}')
        self.assertEqual(challenge.title, 'Buffer Overflow 101')

    def test_update_can_deactivate(self):
        challenge = catalog.create_challenge(self.admin, self.payload)
        catalog.update_challenge(self.admin, challenge.pk, {'is_active': False})
        challenge.refresh_from_db()
        self.assertFalse(challenge.is_active)

    def test_update_rejects_invalid_points(self):
        challenge = catalog.create_challenge(self.admin, self.payload)
        with self.assertRaises(ValidationError):
            catalog.update_challenge(self.admin, challenge.pk, {'points': 0})
        challenge.refresh_from_db()
        self.assertEqual(challenge.points, 400)

    def test_update_unknown_challenge(self):
        with self.assertRaises(NotFound):
            catalog.update_challenge(self.admin, 99999, {'points': 10})

    def test_list_all_includes_flags_and_inactive(self):
        TestDataFactory.create_challenge('Hidden', flag='CTF{hidden}', is_active=False)
        items = catalog.list_all(self.admin)
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0]['flag'], 'CTF{hidden}')
        self.assertFalse(items[0]['is_active'])

    def test_delete_unused_challenge(self):
        challenge = catalog.create_challenge(self.admin, self.payload)
        catalog.delete_challenge(self.admin, challenge.pk)
        self.assertFalse(Challenge.objects.filter(pk=challenge.pk).exists())

    def test_delete_refused_once_attempted(self):
        challenge = catalog.create_challenge(self.admin, self.payload)
        TestDataFactory.create_wrong_submission(self.player, challenge)
        with self.assertRaises(ValidationError):
            catalog.delete_challenge(self.admin, challenge.pk)
        self.assertTrue(Challenge.objects.filter(pk=challenge.pk).exists())

    def test_non_admin_rejected_without_side_effects(self):
        with self.assertRaises(PermissionDenied):
            catalog.create_challenge(self.player, self.payload)
        self.assertEqual(Challenge.objects.count(), 0)

        challenge = TestDataFactory.create_challenge(points=100)
        with self.assertRaises(PermissionDenied):
            catalog.update_challenge(self.player, challenge.pk, {'points': 1})
        with self.assertRaises(PermissionDenied):
            catalog.delete_challenge(self.player, challenge.pk)
        with self.assertRaises(PermissionDenied):
            catalog.list_all(self.player)
        challenge.refresh_from_db()
        self.assertEqual(challenge.points, 100)

    def test_actor_may_be_an_id(self):
        self.assertEqual(catalog.list_all(self.admin.pk), [])
        with self.assertRaises(PermissionDenied):
            catalog.list_all(self.player.pk)

    def test_deactivated_admin_loses_access(self):
        self.admin.is_active = False
        self.admin.save()
        with self.assertRaises(PermissionDenied):
            catalog.list_all(self.admin)
