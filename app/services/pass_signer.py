import hashlib
import io
import json
import logging
import os
import subprocess
import tempfile
import zipfile
from typing import Protocol

from app.core.errors import SigningError
from app.services.certificate_manager import SigningCredentials

logger = logging.getLogger(__name__)


class PassSigner(Protocol):
    def sign(
        self,
        assets: dict[str, bytes],
        credentials: SigningCredentials,
        pass_json: dict,
    ) -> bytes:
        """Return the signed .pkpass archive, or raise SigningError."""
        ...


def create_manifest(files: dict[str, bytes]) -> bytes:
    """Create manifest.json with SHA-1 hashes of all files."""
    manifest = {}
    for filename, content in files.items():
        manifest[filename] = hashlib.sha1(content).hexdigest()
    return json.dumps(manifest).encode("utf-8")


def build_archive(files: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for filename, content in files.items():
            zf.writestr(filename, content)
    return buffer.getvalue()


class OpenSSLPassSigner:
    """Signs pass manifests with a detached PKCS#7 signature via the OpenSSL CLI."""

    def __init__(self, openssl_bin: str = "openssl"):
        self.openssl_bin = openssl_bin

    def _sign_manifest(self, manifest_data: bytes, credentials: SigningCredentials) -> bytes:
        with tempfile.TemporaryDirectory() as tmpdir:
            paths = {
                "manifest": os.path.join(tmpdir, "manifest.json"),
                "signature": os.path.join(tmpdir, "signature"),
                "cert": os.path.join(tmpdir, "signerCert.pem"),
                "key": os.path.join(tmpdir, "signerKey.pem"),
                "wwdr": os.path.join(tmpdir, "wwdr.pem"),
            }
            for name, data in (
                ("manifest", manifest_data),
                ("cert", credentials.signer_cert_pem),
                ("key", credentials.signer_key_pem),
                ("wwdr", credentials.wwdr_cert_pem),
            ):
                with open(paths[name], "wb") as f:
                    f.write(data)
            os.chmod(paths["key"], 0o600)

            cmd = [
                self.openssl_bin, "smime", "-sign",
                "-signer", paths["cert"],
                "-inkey", paths["key"],
                "-certfile", paths["wwdr"],
                "-in", paths["manifest"],
                "-out", paths["signature"],
                "-outform", "DER",
                "-binary",
            ]
            if credentials.key_passphrase:
                cmd.extend(["-passin", f"pass:{credentials.key_passphrase}"])

            try:
                result = subprocess.run(cmd, capture_output=True, text=True)
            except OSError as e:
                raise SigningError(f"Could not run {self.openssl_bin}") from e
            if result.returncode != 0:
                logger.error(f"OpenSSL signing failed: {result.stderr.strip()}")
                raise SigningError("OpenSSL signing failed")

            with open(paths["signature"], "rb") as f:
                return f.read()

    def sign(
        self,
        assets: dict[str, bytes],
        credentials: SigningCredentials,
        pass_json: dict,
    ) -> bytes:
        files = dict(assets)
        files["pass.json"] = json.dumps(pass_json, ensure_ascii=False).encode("utf-8")

        manifest_data = create_manifest(files)
        files["manifest.json"] = manifest_data
        files["signature"] = self._sign_manifest(manifest_data, credentials)

        return build_archive(files)
