#!/usr/bin/env python3
"""
Roster index joining certificates to the workforce members who hold them
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from database.records import Certificate, WorkforceMember


class RosterIndex:
    """
    Resolves certificate holders against the roster.

    Certificates that carry a holder_id join by identifier. Certificates
    without one fall back to exact full-name matching, so two members sharing
    a name both see such a certificate.
    """

    def __init__(self, members: Iterable[WorkforceMember], certificates: Iterable[Certificate]):
        self.members: List[WorkforceMember] = list(members)
        self.certificates: List[Certificate] = list(certificates)

        self._by_id: Dict[str, WorkforceMember] = {m.id: m for m in self.members}
        self._by_name: Dict[str, List[WorkforceMember]] = defaultdict(list)
        for member in self.members:
            self._by_name[member.full_name].append(member)

        self._certificates_by_member: Dict[str, List[Certificate]] = defaultdict(list)
        for cert in self.certificates:
            for holder in self._holders_of(cert):
                self._certificates_by_member[holder.id].append(cert)

    def _holders_of(self, cert: Certificate) -> List[WorkforceMember]:
        if cert.holder_id is not None:
            member = self._by_id.get(cert.holder_id)
            return [member] if member else []
        return self._by_name.get(cert.holder_name, [])

    def holder_of(self, cert: Certificate) -> Optional[WorkforceMember]:
        """First roster member holding the certificate, if any"""
        holders = self._holders_of(cert)
        return holders[0] if holders else None

    def certificates_for(self, member: WorkforceMember) -> List[Certificate]:
        return self._certificates_by_member.get(member.id, [])

    def members_by_department(self) -> Dict[str, List[WorkforceMember]]:
        """Members grouped by department, departments in alphabetical order"""
        groups: Dict[str, List[WorkforceMember]] = defaultdict(list)
        for member in self.members:
            groups[member.department].append(member)
        return {department: groups[department] for department in sorted(groups)}

    def department_certificates(self, members: Iterable[WorkforceMember]) -> List[Certificate]:
        """Distinct certificates held by any of the given members, in input order"""
        member_ids = {m.id for m in members}
        return [
            cert for cert in self.certificates
            if any(holder.id in member_ids for holder in self._holders_of(cert))
        ]
