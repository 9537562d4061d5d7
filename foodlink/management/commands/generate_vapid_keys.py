# foodlink/management/commands/generate_vapid_keys.py
import base64

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from django.core.management.base import BaseCommand


def urlsafe_b64encode_nopad(data):
    return base64.urlsafe_b64encode(data).rstrip(b'=').decode('utf-8')


def generate_vapid_keypair():
    """Return (public_key, private_key) as unpadded URL-safe base64 strings."""
    private_key = ec.generate_private_key(ec.SECP256R1())

    # Uncompressed P-256 point, as browsers expect for applicationServerKey
    public_key_bytes = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.UncompressedPoint,
    )
    private_key_bytes = private_key.private_numbers().private_value.to_bytes(32, byteorder='big')
    return urlsafe_b64encode_nopad(public_key_bytes), urlsafe_b64encode_nopad(private_key_bytes)


class Command(BaseCommand):
    help = 'Generate a VAPID key pair for web push notifications'

    def handle(self, *args, **options):
        public_key, private_key = generate_vapid_keypair()
        self.stdout.write(self.style.SUCCESS('Generated VAPID keys. Add them to your .env file:'))
        self.stdout.write(f"VAPID_PUBLIC_KEY={public_key}")
        self.stdout.write(f"VAPID_PRIVATE_KEY={private_key}")
