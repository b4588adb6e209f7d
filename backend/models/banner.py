from datetime import datetime
from . import db, generate_uuid

class Banner(db.Model):
    """Homepage hero banners"""
    __tablename__ = 'banners'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    title = db.Column(db.String(255), nullable=False)
    subtitle = db.Column(db.String(255), nullable=True)
    image_url = db.Column(db.Text, nullable=False)
    link_url = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    sort_order = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<Banner {self.title}>'

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'subtitle': self.subtitle,
            'image_url': self.image_url,
            'link_url': self.link_url,
            'is_active': self.is_active,
            'sort_order': self.sort_order,
        }
