"""
测试公共夹具
"""
import os
import pytest
from datetime import datetime, timezone, timedelta

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID


_KEY = ec.generate_private_key(ec.SECP256R1())


def make_certificate_pem(domain: str, not_after: datetime) -> bytes:
    """生成指定过期时间的自签名PEM证书"""
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, domain)])
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(_KEY.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_after - timedelta(days=90))
        .not_valid_after(not_after)
        .sign(_KEY, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM)


def write_certificate(live_dir, domain: str, days_left: float, now=None) -> str:
    """在证书存储中写入一个还剩 days_left 天过期的证书"""
    now = now or datetime.now(timezone.utc)
    # 留出一小时余量，避免整天边界上的计算误差
    not_after = now + timedelta(days=days_left, hours=1)
    domain_dir = os.path.join(str(live_dir), domain)
    os.makedirs(domain_dir, exist_ok=True)
    path = os.path.join(domain_dir, "cert.pem")
    with open(path, "wb") as f:
        f.write(make_certificate_pem(domain, not_after))
    return path


@pytest.fixture
def live_dir(tmp_path):
    """空的证书存储目录"""
    path = tmp_path / "live"
    path.mkdir()
    return path
