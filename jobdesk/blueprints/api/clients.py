from flask import jsonify, request
from flask_login import login_required
from sqlalchemy import or_
from ...errors import NotFoundError, PreconditionError
from ...extensions import db
from ...models.client import Client
from ...security import permission_required
from .forms import ClientForm, bind, json_payload
from . import api_bp


def _get_client(client_id) -> Client:
    c = db.session.get(Client, client_id)
    if c is None:
        raise NotFoundError(f"Client {client_id} not found")
    return c


def _apply(c: Client, form: ClientForm):
    c.name = form.name.data.strip()
    c.company = form.company.data.strip()
    c.email = form.email.data.strip().lower()
    c.phone = form.phone.data.strip()
    c.address = form.address.data or None
    c.gst_no = form.gstNo.data or None
    c.payment_method = form.paymentMethod.data or "Cash"


@api_bp.get("/clients")
@login_required
@permission_required("clients", "view")
def clients_list():
    qry = Client.query
    q = (request.args.get("q") or "").strip()
    if q:
        like = f"%{q}%"
        qry = qry.filter(or_(Client.name.ilike(like), Client.company.ilike(like), Client.email.ilike(like)))
    return jsonify([c.to_dict() for c in qry.order_by(Client.name.asc()).all()])


@api_bp.get("/clients/<int:client_id>")
@login_required
@permission_required("clients", "view")
def client_detail(client_id):
    c = _get_client(client_id)
    data = c.to_dict()
    data["jobs"] = [j.to_dict() for j in c.jobs]
    return jsonify(data)


@api_bp.post("/clients")
@login_required
@permission_required("clients", "create")
def client_create():
    form = bind(ClientForm, json_payload())
    c = Client()
    _apply(c, form)
    db.session.add(c)
    db.session.commit()
    return jsonify(c.to_dict()), 201


@api_bp.patch("/clients/<int:client_id>")
@login_required
@permission_required("clients", "edit")
def client_update(client_id):
    c = _get_client(client_id)
    form = bind(ClientForm, {**c.to_dict(), **json_payload()})
    _apply(c, form)
    db.session.commit()
    return jsonify(c.to_dict())


@api_bp.delete("/clients/<int:client_id>")
@login_required
@permission_required("clients", "delete")
def client_delete(client_id):
    c = _get_client(client_id)
    if c.jobs:
        raise PreconditionError("Client has jobs; it cannot be deleted.")
    db.session.delete(c)
    db.session.commit()
    return "", 204
