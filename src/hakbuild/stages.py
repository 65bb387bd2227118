"""Stage definitions for the matrix-seshat native build.

Each function here is pure: (PlatformEnvironment, ModuleLayout) -> StagePlan.
Nothing is executed or touched on disk until the orchestrator runs the plan.

Dependency order:
    Windows: build-openssl -> build-sqlcipher-windows -> build-module
    Other:   build-sqlcipher-unix -> build-module
"""

from pathlib import Path

from .layout import ModuleLayout
from .models import BuildStage, StagedArtifact, StagePlan
from .platform_env import PlatformEnvironment

OPENSSL_SOURCE_DIR = "openssl-1.1.1d"
SQLCIPHER_SOURCE_DIR = "sqlcipher-4.3.0"

# sqlcipher only uses a tiny part of openssl. It is linked statically so only
# the used symbols get pulled in; everything else is disabled to cut build time.
OPENSSL_DISABLED_FEATURES: tuple[str, ...] = (
    "no-afalgeng",
    "no-capieng",
    "no-cms",
    "no-ct",
    "no-deprecated",
    "no-dgram",
    "no-dso",
    "no-ec",
    "no-ec2m",
    "no-gost",
    "no-nextprotoneg",
    "no-ocsp",
    "no-sock",
    "no-srp",
    "no-srtp",
    "no-tests",
    "no-ssl",
    "no-tls",
    "no-dtls",
    "no-shared",
    "no-aria",
    "no-camellia",
    "no-cast",
    "no-chacha",
    "no-cmac",
    "no-des",
    "no-dh",
    "no-dsa",
    "no-ecdh",
    "no-ecdsa",
    "no-idea",
    "no-md4",
    "no-mdc2",
    "no-ocb",
    "no-poly1305",
    "no-rc2",
    "no-rc4",
    "no-rmd160",
    "no-scrypt",
    "no-seed",
    "no-siphash",
    "no-sm2",
    "no-sm3",
    "no-sm4",
    "no-whirlpool",
)

CODEC_DEFINE = "-DSQLITE_HAS_CODEC"
MACOS_CRYPTO_BACKEND = "--with-crypto-lib=commoncrypto"
MACOS_FRAMEWORK_LDFLAGS = "LDFLAGS=-framework Security -framework Foundation"
WINDOWS_RUSTFLAGS = "-Ctarget-feature=+crt-static -Clink-args=libcrypto.lib"

# Fixed names the module build expects under the dependency prefix
SQLCIPHER_WIN_LIB_NAME = "sqlcipher.lib"
SQLCIPHER_WIN_HEADER_NAME = "sqlcipher.h"


def openssl_target(platform: PlatformEnvironment) -> str:
    """OpenSSL Configure target for the host architecture."""
    return "VC-WIN64A" if platform.architecture == "x64" else "VC-WIN32"


def build_openssl(platform: PlatformEnvironment, layout: ModuleLayout) -> StagePlan:
    """Configure, build and install a minimal static OpenSSL (Windows only).

    The install_dev target installs straight into the dependency prefix, so
    no staging is needed.
    """
    source_dir = layout.dot_hak_dir / OPENSSL_SOURCE_DIR
    configure_args = (
        "Configure",
        f"--prefix={layout.dep_prefix}",
        *OPENSSL_DISABLED_FEATURES,
        openssl_target(platform),
    )
    return StagePlan(
        name="build-openssl",
        steps=(
            BuildStage("perl", configure_args, source_dir),
            BuildStage("nmake", ("build_libs",), source_dir),
            BuildStage("nmake", ("install_dev",), source_dir),
        ),
    )


def build_sqlcipher_windows(platform: PlatformEnvironment, layout: ModuleLayout) -> StagePlan:
    """Build the SQLCipher static library with nmake against the built OpenSSL.

    Makefile.msc names its outputs libsqlite3.lib / sqlite3.h; both are staged
    into the prefix as sqlcipher.lib / sqlcipher.h.
    """
    build_dir = layout.dot_hak_dir / SQLCIPHER_SOURCE_DIR / "bld"
    overrides = {
        "CCOPTS": f"{CODEC_DEFINE} -I{layout.dep_include_dir}",
        "LTLIBPATHS": f"/LIBPATH:{layout.dep_lib_dir}",
        "LTLIBS": "libcrypto.lib",
    }
    makefile = str(Path("..") / "Makefile.msc")
    return StagePlan(
        name="build-sqlcipher-windows",
        steps=(
            BuildStage(
                "nmake",
                ("/f", makefile, "libsqlite3.lib", "TOP=.."),
                build_dir,
                env_overrides=overrides,
                create_cwd=True,
            ),
        ),
        artifacts=(
            StagedArtifact(build_dir / "libsqlite3.lib", layout.dep_lib_dir / SQLCIPHER_WIN_LIB_NAME),
            StagedArtifact(build_dir / "sqlite3.h", layout.dep_include_dir / SQLCIPHER_WIN_HEADER_NAME),
        ),
    )


def sqlcipher_configure_args(platform: PlatformEnvironment, layout: ModuleLayout) -> tuple[str, ...]:
    """Arguments for SQLCipher's autoconf configure script."""
    args = [
        f"--prefix={layout.dep_prefix}",
        "--enable-tempstore=yes",
        "--enable-shared=no",
    ]
    if platform.is_mac():
        args.append(MACOS_CRYPTO_BACKEND)
    args.append(f"CFLAGS={CODEC_DEFINE}")
    if platform.is_mac():
        args.append(MACOS_FRAMEWORK_LDFLAGS)
    return tuple(args)


def build_sqlcipher_unix(platform: PlatformEnvironment, layout: ModuleLayout) -> StagePlan:
    """Configure, make and install a static SQLCipher into the prefix."""
    source_dir = layout.dot_hak_dir / SQLCIPHER_SOURCE_DIR
    return StagePlan(
        name="build-sqlcipher-unix",
        steps=(
            BuildStage(str(source_dir / "configure"), sqlcipher_configure_args(platform, layout), source_dir),
            BuildStage("make", (), source_dir),
            BuildStage("make", ("install",), source_dir),
        ),
    )


def module_env_overrides(platform: PlatformEnvironment, layout: ModuleLayout) -> dict[str, str]:
    """Environment the module build needs to find the static SQLCipher."""
    env = {
        "SQLCIPHER_STATIC": "1",
        "SQLCIPHER_LIB_DIR": str(layout.dep_lib_dir),
        "SQLCIPHER_INCLUDE_DIR": str(layout.dep_include_dir),
    }
    if platform.is_windows():
        env["RUSTFLAGS"] = WINDOWS_RUSTFLAGS
    return env


def build_module(platform: PlatformEnvironment, layout: ModuleLayout) -> StagePlan:
    """Build the native module in release mode with neon."""
    neon = "neon.cmd" if platform.is_windows() else "neon"
    return StagePlan(
        name="build-module",
        steps=(
            BuildStage(
                str(layout.node_module_bin_dir / neon),
                ("build", "--release"),
                layout.module_build_dir,
                env_overrides=module_env_overrides(platform, layout),
            ),
        ),
    )
