"""
Example program catalog: a handful of reconnaissance tools.

Starting from a domain, tools discover IPs and subdomains, then ports,
then URLs, then vulnerabilities. Used by the demo script and tests.
"""
from typing import List

from progchain.model import Program, ProgramMetadata


def build_example_programs() -> List[Program]:
    return [
        Program(
            id="dnsx",
            requirement_sets=[frozenset({"domain"})],
            outputs={"ip"},
            metadata=ProgramMetadata(
                commands=["dnsx -d {domain} -a -resp-only"],
                comments=["Resolve A records"],
                regex={"ip": r"^(\d+\.\d+\.\d+\.\d+)$"},
            ),
        ),
        Program(
            id="subfinder",
            requirement_sets=[frozenset({"domain"})],
            outputs={"subdomain"},
            metadata=ProgramMetadata(
                commands=["subfinder -d {domain} -silent"],
                comments=["Passive subdomain enumeration"],
            ),
        ),
        Program(
            id="whois",
            requirement_sets=[frozenset({"domain"}), frozenset({"ip"})],
            outputs={"organization"},
            metadata=ProgramMetadata(commands=["whois {domain}"]),
        ),
        Program(
            id="nmap",
            requirement_sets=[frozenset({"ip"}), frozenset({"subdomain"})],
            outputs={"port", "service"},
            metadata=ProgramMetadata(
                commands=["nmap -sV -oG - {ip}"],
                filter="state == open",
            ),
        ),
        Program(
            id="httpx",
            requirement_sets=[frozenset({"ip", "port"}), frozenset({"subdomain"})],
            outputs={"url"},
            metadata=ProgramMetadata(commands=["httpx -u {ip}:{port} -silent"]),
        ),
        Program(
            id="nuclei",
            requirement_sets=[frozenset({"url"})],
            outputs={"vulnerability"},
            metadata=ProgramMetadata(
                commands=["nuclei -u {url} -silent"],
                comments=["Template-based vulnerability scan"],
            ),
        ),
    ]
