"""
End-to-end tests for abibuild.

These run the command-line entry point against a fake library tree and
shell-script stand-ins for cargo and cargo-ndk.

Run E2E tests with:
    pytest tests/e2e/ -m e2e -v
"""
