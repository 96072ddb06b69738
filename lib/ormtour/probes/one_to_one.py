"""Department --(1..1)--> Manager.

Department holds the foreign key and loads its Manager lazily; Manager
is the other side and loads its Department eagerly, in the same SELECT,
using a LEFT OUTER JOIN.  Lazy loading on the side without the foreign
key would not avoid a query anyway: to know whether there is a
Department at all, the jpa_departments table has to be consulted.

"""
from . import Walkthrough
from .. import lifecycle
from ..model import Department
from ..model import Manager


Walkthrough.init("one_to_one")


@Walkthrough.probe
def persist(session):
    """Persist both sides of a new pair; two INSERTs, no UPDATE."""

    mgr = Manager(mgr_name="M-BB")

    dept = Department(dept_name="D-BB")

    dept.mgr = mgr

    lifecycle.persist(session, mgr)
    lifecycle.persist(session, dept)


@Walkthrough.probe
def find(session):
    """Load the side holding the foreign key; its Manager, and that
    Manager's Department, load on access."""

    dept = lifecycle.find(session, Department, 1)
    print(dept.dept_name)
    print(type(dept.mgr).__name__)


@Walkthrough.probe
def find_inverse(session):
    """Load the side without the foreign key; one SELECT with a LEFT
    OUTER JOIN brings in the Department as well."""

    mgr = lifecycle.find(session, Manager, 1)
    print(mgr.mgr_name)
    print(type(mgr.dept).__name__)
