"""
Compressão de imagens enviadas nas vistorias.

Toda foto aceita é normalizada para JPEG progressivo, no máximo 1920x1920,
qualidade 75, com a orientação EXIF aplicada aos pixels.
"""

import io
import logging
import os

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

EXTENSOES_PERMITIDAS = {'.jpg', '.jpeg', '.png', '.gif'}
TIPOS_PERMITIDOS = {'image/jpeg', 'image/jpg', 'image/png', 'image/gif'}
TAMANHO_MAXIMO_IMAGEM = (1920, 1920)
QUALIDADE_JPEG = 75


class ImagemInvalida(ValueError):
    pass


def validar_upload(arquivo, max_bytes):
    """Confere extensão, content type e tamanho do arquivo enviado."""
    extensao = os.path.splitext(arquivo.name or '')[1].lower()
    content_type = (getattr(arquivo, 'content_type', '') or '').lower()
    if extensao not in EXTENSOES_PERMITIDAS or content_type not in TIPOS_PERMITIDOS:
        raise ImagemInvalida('Tipo de arquivo não permitido. Envie JPEG, PNG ou GIF.')
    if arquivo.size > max_bytes:
        raise ImagemInvalida(f'Arquivo excede o tamanho máximo de {max_bytes // (1024 * 1024)}MB.')


def comprimir_imagem(arquivo, max_size=TAMANHO_MAXIMO_IMAGEM, quality=QUALIDADE_JPEG):
    """Lê um arquivo de imagem e devolve os bytes do JPEG comprimido."""
    try:
        with Image.open(arquivo) as img:
            img = ImageOps.exif_transpose(img)
            if img.mode != 'RGB':
                img = img.convert('RGB')
            # thumbnail nunca amplia a imagem
            img.thumbnail(max_size, Image.Resampling.LANCZOS)
            saida = io.BytesIO()
            img.save(saida, format='JPEG', quality=quality, optimize=True, progressive=True)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise ImagemInvalida('Arquivo não é uma imagem válida.') from exc

    conteudo = saida.getvalue()
    tamanho_original = getattr(arquivo, 'size', None)
    if tamanho_original:
        logger.info('Imagem comprimida: %d -> %d bytes', tamanho_original, len(conteudo))
    return conteudo


def redimensionar_imagem(path, max_size=(400, 400), quality=80):
    """
    Redimensiona uma imagem em disco mantendo a proporção, sobrescrevendo o arquivo.
    Usado no logo da configuração de laudo.
    """
    if not path or not os.path.exists(path):
        return

    with Image.open(path) as img:
        img.thumbnail(max_size, Image.Resampling.LANCZOS)
        img.save(path, quality=quality)
